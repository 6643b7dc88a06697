"""Payment router - FastAPI endpoints for payment records"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import AuthSession, get_current_session
from ...database import get_db
from .schemas import PaymentResponse, PaymentStatusUpdate, PaymentSummaryResponse
from .service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    """Dependency injection for PaymentService"""
    return PaymentService(db)


@router.get("", response_model=list[PaymentResponse])
async def list_payments(
    status: Optional[str] = Query(None),
    session: AuthSession = Depends(get_current_session),
    service: PaymentService = Depends(get_payment_service),
):
    return [PaymentResponse.from_model(p) for p in service.list_payments(session, status)]


@router.get("/summary", response_model=PaymentSummaryResponse, response_model_exclude_none=True)
async def get_payment_summary(
    session: AuthSession = Depends(get_current_session),
    service: PaymentService = Depends(get_payment_service),
):
    """Totals for the payment history header"""
    return service.summary(session)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: str,
    session: AuthSession = Depends(get_current_session),
    service: PaymentService = Depends(get_payment_service),
):
    return PaymentResponse.from_model(service.get_payment(payment_id, session))


@router.patch("/{payment_id}/status", response_model=PaymentResponse)
async def update_payment_status(
    payment_id: str,
    data: PaymentStatusUpdate,
    session: AuthSession = Depends(get_current_session),
    service: PaymentService = Depends(get_payment_service),
):
    return PaymentResponse.from_model(
        service.update_payment_status(payment_id, data.status, session)
    )


__all__ = ["router"]
