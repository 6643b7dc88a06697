"""Favorite router - FastAPI endpoints for favorites"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import AuthSession, get_current_session
from ...database import get_db
from ..catalog.schemas import ServiceResponse
from ..users.schemas import PublicProfileResponse
from .schemas import FavoriteCheckResponse, FavoriteCreate, FavoriteResponse, FavoriteType
from .service import FavoriteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/favorites", tags=["Favorites"])


def get_favorite_service(db: Session = Depends(get_db)) -> FavoriteService:
    """Dependency injection for FavoriteService"""
    return FavoriteService(db)


@router.get("", response_model=list[FavoriteResponse])
async def list_favorites(
    type: Optional[FavoriteType] = Query(None),
    session: AuthSession = Depends(get_current_session),
    service: FavoriteService = Depends(get_favorite_service),
):
    return [FavoriteResponse.from_model(f) for f in service.list_favorites(session, type)]


@router.post("", response_model=FavoriteResponse)
async def add_favorite(
    data: FavoriteCreate,
    response: Response,
    session: AuthSession = Depends(get_current_session),
    service: FavoriteService = Depends(get_favorite_service),
):
    """Save a service or provider. Saving it again returns the existing favorite."""
    favorite, exists = service.add_favorite(data.type, data.itemId, session)
    response.status_code = 200 if exists else 201
    return FavoriteResponse.from_model(favorite, exists=exists)


@router.get("/check", response_model=FavoriteCheckResponse)
async def check_favorite(
    type: FavoriteType = Query(...),
    item_id: str = Query(..., alias="itemId"),
    session: AuthSession = Depends(get_current_session),
    service: FavoriteService = Depends(get_favorite_service),
):
    favorite = service.find_favorite(session, type, item_id)
    return FavoriteCheckResponse(isFavorite=favorite is not None, favoriteId=favorite.id if favorite else None)


@router.get("/services", response_model=list[ServiceResponse])
async def get_favorite_services(
    session: AuthSession = Depends(get_current_session),
    service: FavoriteService = Depends(get_favorite_service),
):
    return [ServiceResponse.from_model(s) for s in service.favorite_services(session.uid)]


@router.get("/providers", response_model=list[PublicProfileResponse])
async def get_favorite_providers(
    session: AuthSession = Depends(get_current_session),
    service: FavoriteService = Depends(get_favorite_service),
):
    return [PublicProfileResponse.from_model(u) for u in service.favorite_providers(session.uid)]


@router.delete("/{favorite_id}")
async def remove_favorite(
    favorite_id: str,
    session: AuthSession = Depends(get_current_session),
    service: FavoriteService = Depends(get_favorite_service),
):
    service.remove_favorite(favorite_id, session)
    return {"message": "Favorite removed"}


__all__ = ["router"]
