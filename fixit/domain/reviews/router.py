"""Review router - FastAPI endpoints for reviews and ratings"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import AuthSession, get_current_session, require_role
from ...database import get_db
from ..bookings.schemas import BookingResponse
from .schemas import ProviderRatingResponse, ReviewCreate, ReviewResponse, ReviewUpdate
from .service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["Reviews"])


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    """Dependency injection for ReviewService"""
    return ReviewService(db)


@router.post("", response_model=ReviewResponse, status_code=201)
async def create_review(
    data: ReviewCreate,
    session: AuthSession = Depends(require_role("client")),
    service: ReviewService = Depends(get_review_service),
):
    return ReviewResponse.from_model(service.create_review(data, session))


@router.get("/mine", response_model=list[ReviewResponse])
async def get_my_reviews(
    session: AuthSession = Depends(get_current_session),
    service: ReviewService = Depends(get_review_service),
):
    return [ReviewResponse.from_model(r) for r in service.list_client_reviews(session.uid)]


@router.get("/pending", response_model=list[BookingResponse])
async def get_pending_reviews(
    session: AuthSession = Depends(require_role("client")),
    service: ReviewService = Depends(get_review_service),
):
    """Completed bookings still waiting for a review"""
    return [BookingResponse.from_model(b) for b in service.pending_reviews(session.uid)]


@router.get("/service/{service_id}", response_model=list[ReviewResponse])
async def get_service_reviews(
    service_id: str,
    limit: Optional[int] = Query(None, ge=1, le=100),
    service: ReviewService = Depends(get_review_service),
):
    return [ReviewResponse.from_model(r) for r in service.list_service_reviews(service_id, limit)]


@router.get("/provider/{provider_id}", response_model=list[ReviewResponse])
async def get_provider_reviews(
    provider_id: str,
    limit: Optional[int] = Query(None, ge=1, le=100),
    service: ReviewService = Depends(get_review_service),
):
    return [ReviewResponse.from_model(r) for r in service.list_provider_reviews(provider_id, limit)]


@router.get("/provider/{provider_id}/rating", response_model=ProviderRatingResponse)
async def get_provider_rating(
    provider_id: str,
    service: ReviewService = Depends(get_review_service),
):
    return service.provider_rating(provider_id)


@router.patch("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: str,
    data: ReviewUpdate,
    session: AuthSession = Depends(get_current_session),
    service: ReviewService = Depends(get_review_service),
):
    return ReviewResponse.from_model(service.update_review(review_id, data, session))


@router.delete("/{review_id}")
async def delete_review(
    review_id: str,
    session: AuthSession = Depends(get_current_session),
    service: ReviewService = Depends(get_review_service),
):
    service.delete_review(review_id, session)
    return {"message": "Review deleted successfully"}


__all__ = ["router"]
