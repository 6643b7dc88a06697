"""Review service - Reviews and rating aggregation"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...models import Booking, Review
from ...shared.timestamps import utcnow
from ..bookings.repository import BookingRepository
from ..catalog.repository import CatalogRepository
from .aggregates import average_rating
from .repository import ReviewRepository
from .schemas import ReviewCreate, ReviewUpdate

logger = logging.getLogger(__name__)


class ReviewService:
    """Service layer for reviews. Every write refreshes the service's cached rating."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReviewRepository()
        self.bookings = BookingRepository()
        self.catalog = CatalogRepository()

    def get_review(self, review_id: str) -> Review:
        review = self.repo.get_review(self.db, review_id)
        if not review:
            raise HTTPException(status_code=404, detail="Review not found")
        return review

    def create_review(self, data: ReviewCreate, session: AuthSession) -> Review:
        if not (session.is_client or session.is_admin):
            raise HTTPException(status_code=403, detail="Only clients can leave reviews")

        service = self.catalog.get_service(self.db, data.serviceId)
        if not service:
            raise HTTPException(status_code=404, detail="Service not found")

        completed = self.bookings.completed_for_client(self.db, session.uid, service.id)
        if not completed:
            raise HTTPException(
                status_code=400, detail="You can only review services you have completed"
            )
        booking_id = data.bookingId or completed[0].id
        if booking_id not in {b.id for b in completed}:
            raise HTTPException(status_code=400, detail="Booking is not a completed booking of this service")

        if self.repo.get_client_review(self.db, session.uid, service.id):
            raise HTTPException(status_code=409, detail="You have already reviewed this service")

        try:
            review = self.repo.add_review(
                self.db,
                service_id=service.id,
                service_name=service.name,
                provider_id=service.provider_id,
                provider_name=service.provider_name,
                client_id=session.uid,
                client_name=session.display_name,
                booking_id=booking_id,
                rating=data.rating,
                comment=data.comment,
            )
            self.repo.refresh_service_aggregate(self.db, service.id)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Duplicate review by {session.uid} for service {service.id}")
            raise HTTPException(status_code=409, detail="You have already reviewed this service") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create review for service {service.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create review") from e

        self.db.refresh(review)
        logger.info(f"⭐ Review {review.id} ({review.rating}/5) for service {service.id}")
        return review

    def update_review(self, review_id: str, data: ReviewUpdate, session: AuthSession) -> Review:
        review = self.get_review(review_id)
        if review.client_id != session.uid:
            raise HTTPException(status_code=403, detail="You can only edit your own reviews")

        try:
            if data.rating is not None:
                review.rating = data.rating
            if data.comment is not None:
                review.comment = data.comment
            review.updated_at = utcnow()
            self.db.flush()
            self.repo.refresh_service_aggregate(self.db, review.service_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update review {review_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update review") from e

        self.db.refresh(review)
        logger.info(f"✅ Review updated: {review_id}")
        return review

    def delete_review(self, review_id: str, session: AuthSession) -> None:
        review = self.get_review(review_id)
        if review.client_id != session.uid and not session.is_admin:
            raise HTTPException(status_code=403, detail="You can only delete your own reviews")

        service_id = review.service_id
        try:
            self.db.delete(review)
            self.db.flush()
            self.repo.refresh_service_aggregate(self.db, service_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete review {review_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete review") from e

        logger.info(f"🗑️ Review deleted: {review_id}")

    def pending_reviews(self, client_id: str) -> list[Booking]:
        """Completed bookings whose service the client has not reviewed yet"""
        reviewed = self.repo.reviewed_service_ids(self.db, client_id)
        completed = self.bookings.completed_for_client(self.db, client_id)
        return [b for b in completed if b.service_id not in reviewed]

    def provider_rating(self, provider_id: str) -> dict:
        ratings = self.repo.provider_ratings(self.db, provider_id)
        return {
            "providerId": provider_id,
            "averageRating": average_rating(ratings),
            "reviewCount": len(ratings),
        }

    def list_service_reviews(self, service_id: str, limit: Optional[int] = None) -> list[Review]:
        return self.repo.list_service_reviews(self.db, service_id, limit)

    def list_provider_reviews(self, provider_id: str, limit: Optional[int] = None) -> list[Review]:
        return self.repo.list_provider_reviews(self.db, provider_id, limit)

    def list_client_reviews(self, client_id: str, limit: Optional[int] = None) -> list[Review]:
        return self.repo.list_client_reviews(self.db, client_id, limit)
