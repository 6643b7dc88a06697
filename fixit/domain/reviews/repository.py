"""Review repository - Database operations for reviews and rating aggregates"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Review, Service
from .aggregates import average_rating


class ReviewRepository:
    """Repository for review database operations. Writes are committed by the caller."""

    @staticmethod
    def get_review(db: Session, review_id: str) -> Optional[Review]:
        return db.query(Review).filter(Review.id == review_id).first()

    @staticmethod
    def get_client_review(db: Session, client_id: str, service_id: str) -> Optional[Review]:
        return (
            db.query(Review)
            .filter(Review.client_id == client_id, Review.service_id == service_id)
            .first()
        )

    @staticmethod
    def add_review(db: Session, **review_data) -> Review:
        review = Review(**review_data)
        db.add(review)
        db.flush()
        return review

    @staticmethod
    def refresh_service_aggregate(db: Session, service_id: str) -> None:
        """Recompute the cached rating and review count of a service from its reviews"""
        ratings = [row.rating for row in db.query(Review.rating).filter(Review.service_id == service_id)]
        db.query(Service).filter(Service.id == service_id).update(
            {
                "rating": average_rating(ratings) if ratings else None,
                "review_count": len(ratings),
            },
            synchronize_session=False,
        )

    @staticmethod
    def list_service_reviews(db: Session, service_id: str, limit: Optional[int] = None) -> list[Review]:
        query = (
            db.query(Review)
            .filter(Review.service_id == service_id)
            .order_by(Review.created_at.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def list_provider_reviews(db: Session, provider_id: str, limit: Optional[int] = None) -> list[Review]:
        query = (
            db.query(Review)
            .filter(Review.provider_id == provider_id)
            .order_by(Review.created_at.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def list_client_reviews(db: Session, client_id: str, limit: Optional[int] = None) -> list[Review]:
        query = (
            db.query(Review)
            .filter(Review.client_id == client_id)
            .order_by(Review.created_at.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def provider_ratings(db: Session, provider_id: str) -> list[int]:
        return [row.rating for row in db.query(Review.rating).filter(Review.provider_id == provider_id)]

    @staticmethod
    def reviewed_service_ids(db: Session, client_id: str) -> set[str]:
        rows = db.query(Review.service_id).filter(Review.client_id == client_id).all()
        return {row.service_id for row in rows}
