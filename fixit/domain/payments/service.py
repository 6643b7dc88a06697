"""Payment service - Payment records kept alongside bookings"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...models import Payment
from ...shared.timestamps import utcnow
from ..bookings.lifecycle import round_money
from .repository import PaymentRepository

logger = logging.getLogger(__name__)

# Recorded status changes; nothing is actually charged
PAYMENT_TRANSITIONS = {
    "pending": ("paid", "failed"),
    "paid": ("refunded",),
}


def total_amount(amounts) -> float:
    return float(sum((round_money(a) for a in amounts), round_money(0)))


class PaymentService:
    """Service layer for payment records"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PaymentRepository()

    def list_payments(self, session: AuthSession, status: Optional[str] = None) -> list[Payment]:
        if session.is_provider:
            return self.repo.list_payments(self.db, provider_id=session.uid, status=status)
        if session.is_client:
            return self.repo.list_payments(self.db, client_id=session.uid, status=status)
        return self.repo.list_payments(self.db, status=status)

    def get_payment(self, payment_id: str, session: AuthSession) -> Payment:
        payment = self.repo.get_payment(self.db, payment_id)
        if not payment:
            raise HTTPException(status_code=404, detail="Payment not found")
        if not session.is_admin and session.uid not in (payment.client_id, payment.provider_id):
            raise HTTPException(status_code=403, detail="Access denied to this payment")
        return payment

    def update_payment_status(self, payment_id: str, status: str, session: AuthSession) -> Payment:
        payment = self.get_payment(payment_id, session)
        if payment.provider_id != session.uid and not session.is_admin:
            raise HTTPException(status_code=403, detail="Only the provider can update this payment")

        current = payment.status
        if status not in PAYMENT_TRANSITIONS.get(current, ()):
            logger.warning(f"⚠️ Rejected payment {payment_id} change {current} → {status}")
            raise HTTPException(
                status_code=409, detail=f"Cannot change a {current} payment to {status}"
            )

        try:
            changed = self.repo.update_if_status(
                self.db, payment_id, current, status=status, updated_at=utcnow()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update payment {payment_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update payment") from e

        if not changed:
            raise HTTPException(
                status_code=409, detail="Payment was modified by another request. Please reload."
            )

        logger.info(f"💳 Payment {payment_id}: {current} → {status}")
        self.db.expire_all()
        return self.repo.get_payment(self.db, payment_id)

    def client_summary(self, client_id: str) -> dict:
        return {
            "totalSpent": total_amount(self.repo.amounts(self.db, "paid", client_id=client_id)),
            "upcomingTotal": total_amount(self.repo.amounts(self.db, "pending", client_id=client_id)),
        }

    def provider_summary(self, provider_id: str) -> dict:
        return {
            "totalRevenue": total_amount(self.repo.amounts(self.db, "paid", provider_id=provider_id)),
        }

    def platform_summary(self) -> dict:
        """Marketplace-wide totals, same scope as the admin payment listing"""
        return {
            "totalSpent": total_amount(self.repo.amounts(self.db, "paid")),
            "upcomingTotal": total_amount(self.repo.amounts(self.db, "pending")),
            "totalRevenue": total_amount(self.repo.amounts(self.db, "paid")),
        }

    def summary(self, session: AuthSession) -> dict:
        if session.is_admin:
            return self.platform_summary()
        if session.is_provider:
            return self.provider_summary(session.uid)
        return self.client_summary(session.uid)
