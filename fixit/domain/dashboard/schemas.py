"""Dashboard schemas - Read-only summaries for clients and providers"""

from pydantic import BaseModel

from ..bookings.schemas import BookingResponse
from ..payments.schemas import PaymentResponse
from ..reviews.schemas import ReviewResponse


class ClientDashboardResponse(BaseModel):
    activeBookings: int
    upcomingBookings: int
    favoriteServices: int
    favoriteProviders: int
    totalFavorites: int
    totalSpent: float
    reviewsGiven: int
    averageRating: float
    pendingReviews: int
    recentBookings: list[BookingResponse]
    recentReviews: list[ReviewResponse]


class ProviderDashboardResponse(BaseModel):
    totalRevenue: float
    bookingsCount: int
    activeClients: int
    averageRating: float
    reviewCount: int
    upcomingBookings: list[BookingResponse]
    recentPayments: list[PaymentResponse]
