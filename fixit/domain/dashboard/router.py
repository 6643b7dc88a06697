"""Dashboard router - Summary endpoints for the client and provider dashboards"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import AuthSession, require_role
from ...database import get_db
from .schemas import ClientDashboardResponse, ProviderDashboardResponse
from .service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    """Dependency injection for DashboardService"""
    return DashboardService(db)


@router.get("/client", response_model=ClientDashboardResponse)
async def get_client_dashboard(
    session: AuthSession = Depends(require_role("client")),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.client_dashboard(session)


@router.get("/provider", response_model=ProviderDashboardResponse)
async def get_provider_dashboard(
    session: AuthSession = Depends(require_role("provider")),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.provider_dashboard(session)


__all__ = ["router"]
