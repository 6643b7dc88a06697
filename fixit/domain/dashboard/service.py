"""Dashboard service - Compositions of the other stores for the dashboards"""

import logging

from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...shared.timestamps import utcnow
from ..bookings.lifecycle import ACTIVE_STATUSES, CONFIRMED, PENDING
from ..bookings.repository import BookingRepository
from ..bookings.schemas import BookingResponse
from ..favorites.repository import FavoriteRepository
from ..payments.repository import PaymentRepository
from ..payments.schemas import PaymentResponse
from ..payments.service import total_amount
from ..reviews.aggregates import average_rating
from ..reviews.repository import ReviewRepository
from ..reviews.schemas import ReviewResponse
from ..reviews.service import ReviewService

logger = logging.getLogger(__name__)

RECENT_BOOKINGS = 5
RECENT_REVIEWS = 3
PROVIDER_UPCOMING = 4
PROVIDER_RECENT_PAYMENTS = 4


class DashboardService:
    """Read-only figures; nothing here writes"""

    def __init__(self, db: Session):
        self.db = db
        self.bookings = BookingRepository()
        self.favorites = FavoriteRepository()
        self.payments = PaymentRepository()
        self.reviews = ReviewRepository()

    def client_dashboard(self, session: AuthSession) -> dict:
        uid = session.uid
        waiting = (PENDING, CONFIRMED)

        favorite_services = self.favorites.count_favorites(self.db, uid, "service")
        favorite_providers = self.favorites.count_favorites(self.db, uid, "provider")
        given = self.reviews.list_client_reviews(self.db, uid)

        return {
            "activeBookings": self.bookings.count_bookings(self.db, client_id=uid, statuses=waiting),
            "upcomingBookings": len(
                self.bookings.list_upcoming(self.db, utcnow(), waiting, client_id=uid)
            ),
            "favoriteServices": favorite_services,
            "favoriteProviders": favorite_providers,
            "totalFavorites": favorite_services + favorite_providers,
            "totalSpent": total_amount(self.payments.amounts(self.db, "paid", client_id=uid)),
            "reviewsGiven": len(given),
            "averageRating": average_rating(r.rating for r in given),
            "pendingReviews": len(ReviewService(self.db).pending_reviews(uid)),
            "recentBookings": [
                BookingResponse.from_model(b)
                for b in self.bookings.list_bookings(self.db, client_id=uid, limit=RECENT_BOOKINGS)
            ],
            "recentReviews": [ReviewResponse.from_model(r) for r in given[:RECENT_REVIEWS]],
        }

    def provider_dashboard(self, session: AuthSession) -> dict:
        uid = session.uid
        ratings = self.reviews.provider_ratings(self.db, uid)

        return {
            "totalRevenue": total_amount(self.payments.amounts(self.db, "paid", provider_id=uid)),
            "bookingsCount": self.bookings.count_bookings(self.db, provider_id=uid),
            "activeClients": self.bookings.distinct_clients(self.db, uid, ACTIVE_STATUSES),
            "averageRating": average_rating(ratings),
            "reviewCount": len(ratings),
            "upcomingBookings": [
                BookingResponse.from_model(b)
                for b in self.bookings.list_upcoming(
                    self.db, utcnow(), ACTIVE_STATUSES, provider_id=uid, limit=PROVIDER_UPCOMING
                )
            ],
            "recentPayments": [
                PaymentResponse.from_model(p)
                for p in self.payments.list_payments(
                    self.db, provider_id=uid, status="paid", limit=PROVIDER_RECENT_PAYMENTS
                )
            ],
        }
