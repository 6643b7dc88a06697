"""Booking router - FastAPI endpoints for bookings"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import AuthSession, get_current_session, require_role
from ...database import get_db
from .schemas import BookingCancel, BookingCreate, BookingResponse
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


@router.get("", response_model=list[BookingResponse])
async def list_bookings(
    tab: str = Query("all"),
    search: Optional[str] = Query(None),
    session: AuthSession = Depends(get_current_session),
    service: BookingService = Depends(get_booking_service),
):
    """Bookings of the signed-in client, or for the signed-in provider's services"""
    bookings = service.list_bookings(session, tab=tab, search=search)
    return [BookingResponse.from_model(b) for b in bookings]


@router.post("", response_model=BookingResponse, status_code=201)
async def create_booking(
    data: BookingCreate,
    session: AuthSession = Depends(require_role("client")),
    service: BookingService = Depends(get_booking_service),
):
    return BookingResponse.from_model(service.create_booking(data, session))


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    session: AuthSession = Depends(get_current_session),
    service: BookingService = Depends(get_booking_service),
):
    return BookingResponse.from_model(service.get_booking(booking_id, session))


# ============================================================================
# STATUS TRANSITIONS
# ============================================================================


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
async def confirm_booking(
    booking_id: str,
    session: AuthSession = Depends(get_current_session),
    service: BookingService = Depends(get_booking_service),
):
    return BookingResponse.from_model(service.confirm_booking(booking_id, session))


@router.post("/{booking_id}/start", response_model=BookingResponse)
async def start_service(
    booking_id: str,
    session: AuthSession = Depends(get_current_session),
    service: BookingService = Depends(get_booking_service),
):
    return BookingResponse.from_model(service.start_service(booking_id, session))


@router.post("/{booking_id}/complete", response_model=BookingResponse)
async def complete_service(
    booking_id: str,
    session: AuthSession = Depends(get_current_session),
    service: BookingService = Depends(get_booking_service),
):
    return BookingResponse.from_model(service.complete_service(booking_id, session))


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: str,
    data: Optional[BookingCancel] = None,
    session: AuthSession = Depends(get_current_session),
    service: BookingService = Depends(get_booking_service),
):
    reason = data.reason if data else None
    return BookingResponse.from_model(service.cancel_booking(booking_id, session, reason))


__all__ = ["router"]
