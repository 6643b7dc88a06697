"""Catalog repository - Database operations for service listings"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Service
from ...shared.validators import contains_pattern

# Duration buckets in minutes: (lower exclusive, upper inclusive)
DURATION_BUCKETS = {
    "short": (None, 60),
    "medium": (60, 120),
    "long": (120, None),
}


def _duration_clause(bucket: str):
    lower, upper = DURATION_BUCKETS[bucket]
    if lower is None:
        return Service.duration <= upper
    if upper is None:
        return Service.duration > lower
    return Service.duration.between(lower + 1, upper)


class CatalogRepository:
    """Repository for service listing database operations"""

    @staticmethod
    def get_service(db: Session, service_id: str) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def get_services_by_ids(db: Session, service_ids: list[str]) -> list[Service]:
        if not service_ids:
            return []
        return db.query(Service).filter(Service.id.in_(service_ids)).all()

    @staticmethod
    def list_provider_services(
        db: Session, provider_id: str, status: Optional[str] = None
    ) -> list[Service]:
        query = db.query(Service).filter(Service.provider_id == provider_id)
        if status:
            query = query.filter(Service.status == status)
        return query.order_by(Service.created_at.desc()).all()

    @staticmethod
    def create_service(db: Session, **service_data) -> Service:
        service = Service(**service_data)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update_service(db: Session, service: Service, **updates) -> Service:
        for key, value in updates.items():
            if value is not None and hasattr(service, key):
                setattr(service, key, value)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def delete_service(db: Session, service: Service) -> None:
        db.delete(service)
        db.commit()

    @staticmethod
    def search_services(
        db: Session,
        category: Optional[str] = None,
        search: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        min_rating: Optional[float] = None,
        durations: Optional[list[str]] = None,
        sort: str = "relevance",
        offset: int = 0,
        limit: int = 12,
    ) -> list[Service]:
        """Active services matching every given filter"""
        query = db.query(Service).filter(Service.status == "active")

        if category and category != "all":
            query = query.filter(Service.category == category)

        if search and search.strip():
            pattern = contains_pattern(search)
            query = query.filter(
                or_(
                    Service.name.ilike(pattern, escape="\\"),
                    Service.description.ilike(pattern, escape="\\"),
                    Service.business_name.ilike(pattern, escape="\\"),
                )
            )

        if min_price is not None:
            query = query.filter(Service.price >= min_price)
        if max_price is not None:
            query = query.filter(Service.price <= max_price)

        if min_rating:
            # Unrated services count as 0
            query = query.filter(func.coalesce(Service.rating, 0) >= min_rating)

        if durations:
            query = query.filter(or_(*[_duration_clause(bucket) for bucket in durations]))

        if sort == "price_asc":
            query = query.order_by(Service.price.asc(), Service.created_at.desc())
        elif sort == "price_desc":
            query = query.order_by(Service.price.desc(), Service.created_at.desc())
        elif sort == "rating_desc":
            query = query.order_by(
                func.coalesce(Service.rating, 0).desc(), Service.created_at.desc()
            )
        else:
            query = query.order_by(Service.created_at.desc())

        return query.offset(offset).limit(limit).all()
