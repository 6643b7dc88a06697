"""Catalog service - Business logic for service listings"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...models import Service
from ...shared.timestamps import utcnow
from ...shared.validators import SERVICE_CATEGORIES
from .repository import DURATION_BUCKETS, CatalogRepository
from .schemas import ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("relevance", "newest", "price_asc", "price_desc", "rating_desc")


class CatalogService:
    """Service layer for service listings"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CatalogRepository()

    def _check_owner(self, service: Service, session: AuthSession, action: str) -> None:
        if service.provider_id != session.uid and not session.is_admin:
            logger.warning(f"🚫 {session.uid} tried to {action} service {service.id} they do not own")
            raise HTTPException(status_code=403, detail=f"You can only {action} your own services")

    def get_service(self, service_id: str) -> Service:
        service = self.repo.get_service(self.db, service_id)
        if not service:
            raise HTTPException(status_code=404, detail="Service not found")
        return service

    def get_categories(self) -> list[dict]:
        return [{"value": value, "label": label} for value, label in SERVICE_CATEGORIES.items()]

    def list_provider_services(self, provider_id: str, include_inactive: bool = False) -> list[Service]:
        """Newest first; drafts and archived listings only for the owner"""
        status = None if include_inactive else "active"
        return self.repo.list_provider_services(self.db, provider_id, status=status)

    def create_service(self, data: ServiceCreate, session: AuthSession) -> Service:
        if not (session.is_provider or session.is_admin):
            raise HTTPException(status_code=403, detail="Only providers can create services")

        logger.info(f"📥 Creating service '{data.name}' for provider {session.uid}")
        try:
            service = self.repo.create_service(
                self.db,
                name=data.name,
                description=data.description,
                price=data.price,
                duration=data.duration,
                category=data.category,
                status=data.status,
                provider_id=session.uid,
                provider_name=session.display_name,
                business_name=session.business_name,
                review_count=0,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create service for {session.uid}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create service") from e

        logger.info(f"✅ Service created: {service.id}")
        return service

    def update_service(self, service_id: str, data: ServiceUpdate, session: AuthSession) -> Service:
        service = self.get_service(service_id)
        self._check_owner(service, session, "update")

        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        if "description" in updates:
            updates["description"] = updates["description"].strip()
        updates["updated_at"] = utcnow()

        try:
            service = self.repo.update_service(self.db, service, **updates)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update service {service_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update service") from e

        logger.info(f"✅ Service updated: {service_id}")
        return service

    def delete_service(self, service_id: str, session: AuthSession) -> None:
        """Bookings, payments and reviews keep their copied names and stay untouched"""
        service = self.get_service(service_id)
        self._check_owner(service, session, "delete")

        try:
            self.repo.delete_service(self.db, service)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete service {service_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete service") from e

        logger.info(f"🗑️ Service deleted: {service_id}")

    def search_services(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        min_rating: Optional[float] = None,
        durations: Optional[list[str]] = None,
        sort: str = "relevance",
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> dict:
        """Filter, sort and page the active catalog"""
        if category and category != "all" and category not in SERVICE_CATEGORIES:
            raise HTTPException(status_code=400, detail=f"Unknown category '{category}'")
        if sort not in SORT_OPTIONS:
            raise HTTPException(
                status_code=400, detail=f"Invalid sort. Allowed: {', '.join(SORT_OPTIONS)}"
            )
        for bucket in durations or []:
            if bucket not in DURATION_BUCKETS:
                raise HTTPException(
                    status_code=400,
                    detail=f"Invalid duration '{bucket}'. Allowed: {', '.join(DURATION_BUCKETS)}",
                )
        if min_price is not None and max_price is not None and min_price > max_price:
            raise HTTPException(status_code=400, detail="minPrice cannot exceed maxPrice")

        page = max(page, 1)
        page_size = min(max(page_size or DEFAULT_PAGE_SIZE, 1), MAX_PAGE_SIZE)

        # One extra row tells whether another page exists
        rows = self.repo.search_services(
            self.db,
            category=category,
            search=search,
            min_price=min_price,
            max_price=max_price,
            min_rating=min_rating,
            durations=durations,
            sort=sort,
            offset=(page - 1) * page_size,
            limit=page_size + 1,
        )
        return {
            "items": rows[:page_size],
            "page": page,
            "pageSize": page_size,
            "hasMore": len(rows) > page_size,
        }
