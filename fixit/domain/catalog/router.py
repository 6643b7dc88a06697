"""Catalog router - FastAPI endpoints for service listings"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import AuthSession, get_current_session, require_role
from ...database import get_db
from .schemas import CategoryResponse, ServiceCreate, ServicePage, ServiceResponse, ServiceUpdate
from .service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/services", tags=["Services"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


# ============================================================================
# BROWSING
# ============================================================================


@router.get("", response_model=ServicePage)
async def search_services(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    min_rating: Optional[float] = Query(None, alias="minRating", ge=0, le=5),
    durations: Optional[list[str]] = Query(None),
    sort: str = Query("relevance"),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
    service: CatalogService = Depends(get_catalog_service),
):
    """Browse active services with filters, sorting and paging"""
    result = service.search_services(
        category=category,
        search=search,
        min_price=min_price,
        max_price=max_price,
        min_rating=min_rating,
        durations=durations,
        sort=sort,
        page=page,
        page_size=page_size,
    )
    return ServicePage(
        items=[ServiceResponse.from_model(s) for s in result["items"]],
        page=result["page"],
        pageSize=result["pageSize"],
        hasMore=result["hasMore"],
    )


@router.get("/categories", response_model=list[CategoryResponse])
async def get_categories(service: CatalogService = Depends(get_catalog_service)):
    return service.get_categories()


@router.get("/mine", response_model=list[ServiceResponse])
async def get_my_services(
    session: AuthSession = Depends(require_role("provider")),
    service: CatalogService = Depends(get_catalog_service),
):
    """All listings of the signed-in provider, drafts and archived included"""
    services = service.list_provider_services(session.uid, include_inactive=True)
    return [ServiceResponse.from_model(s) for s in services]


@router.get("/provider/{provider_id}", response_model=list[ServiceResponse])
async def get_provider_services(
    provider_id: str,
    service: CatalogService = Depends(get_catalog_service),
):
    """Active listings of a provider"""
    return [ServiceResponse.from_model(s) for s in service.list_provider_services(provider_id)]


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(
    service_id: str,
    service: CatalogService = Depends(get_catalog_service),
):
    return ServiceResponse.from_model(service.get_service(service_id))


# ============================================================================
# PROVIDER MANAGEMENT
# ============================================================================


@router.post("", response_model=ServiceResponse, status_code=201)
async def create_service(
    data: ServiceCreate,
    session: AuthSession = Depends(get_current_session),
    service: CatalogService = Depends(get_catalog_service),
):
    return ServiceResponse.from_model(service.create_service(data, session))


@router.patch("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: str,
    data: ServiceUpdate,
    session: AuthSession = Depends(get_current_session),
    service: CatalogService = Depends(get_catalog_service),
):
    return ServiceResponse.from_model(service.update_service(service_id, data, session))


@router.delete("/{service_id}")
async def delete_service(
    service_id: str,
    session: AuthSession = Depends(get_current_session),
    service: CatalogService = Depends(get_catalog_service),
):
    service.delete_service(service_id, session)
    return {"message": "Service deleted successfully"}


__all__ = ["router"]
