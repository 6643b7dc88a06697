"""Payment repository - Database operations for payment records"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Payment


class PaymentRepository:
    """Repository for payment database operations"""

    @staticmethod
    def get_payment(db: Session, payment_id: str) -> Optional[Payment]:
        return db.query(Payment).filter(Payment.id == payment_id).first()

    @staticmethod
    def list_payments(
        db: Session,
        client_id: Optional[str] = None,
        provider_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Payment]:
        query = db.query(Payment)
        if client_id:
            query = query.filter(Payment.client_id == client_id)
        if provider_id:
            query = query.filter(Payment.provider_id == provider_id)
        if status:
            query = query.filter(Payment.status == status)
        query = query.order_by(Payment.date.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def amounts(
        db: Session,
        status: str,
        client_id: Optional[str] = None,
        provider_id: Optional[str] = None,
    ) -> list[float]:
        query = db.query(Payment.amount).filter(Payment.status == status)
        if client_id:
            query = query.filter(Payment.client_id == client_id)
        if provider_id:
            query = query.filter(Payment.provider_id == provider_id)
        return [row.amount for row in query]

    @staticmethod
    def update_if_status(db: Session, payment_id: str, expected_status: str, **updates) -> int:
        rows = (
            db.query(Payment)
            .filter(Payment.id == payment_id, Payment.status == expected_status)
            .update(updates, synchronize_session=False)
        )
        db.commit()
        return rows
