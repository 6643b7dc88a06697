"""Booking repository - Database operations for bookings"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Booking, Payment
from ...shared.validators import contains_pattern


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_booking(db: Session, booking_id: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def create_booking_with_payment(db: Session, booking_data: dict, payment_data: dict) -> Booking:
        """Insert the booking and its payment in a single commit"""
        booking = Booking(**booking_data)
        db.add(booking)
        db.flush()

        payment = Payment(booking_id=booking.id, **payment_data)
        db.add(payment)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def update_if_status(db: Session, booking_id: str, expected_status: str, **updates) -> int:
        """
        Apply ``updates`` only while the booking still has ``expected_status``.
        Returns the number of rows changed; the caller owns the commit.
        """
        return (
            db.query(Booking)
            .filter(Booking.id == booking_id, Booking.status == expected_status)
            .update(updates, synchronize_session=False)
        )

    @staticmethod
    def update_payment_if_status(
        db: Session, booking_id: str, expected_status: str, **updates
    ) -> int:
        return (
            db.query(Payment)
            .filter(Payment.booking_id == booking_id, Payment.status == expected_status)
            .update(updates, synchronize_session=False)
        )

    @staticmethod
    def list_bookings(
        db: Session,
        client_id: Optional[str] = None,
        provider_id: Optional[str] = None,
        statuses: Optional[tuple] = None,
        date_from: Optional[datetime] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Booking]:
        query = db.query(Booking)

        if client_id:
            query = query.filter(Booking.client_id == client_id)
        if provider_id:
            query = query.filter(Booking.provider_id == provider_id)
        if statuses:
            query = query.filter(Booking.status.in_(statuses))
        if date_from is not None:
            query = query.filter(Booking.date >= date_from)
        if search:
            pattern = contains_pattern(search)
            query = query.filter(
                or_(
                    Booking.service_name.ilike(pattern, escape="\\"),
                    Booking.provider_name.ilike(pattern, escape="\\"),
                    Booking.client_name.ilike(pattern, escape="\\"),
                    Booking.client_email.ilike(pattern, escape="\\"),
                )
            )

        query = query.order_by(Booking.date.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def list_upcoming(
        db: Session,
        now: datetime,
        statuses: tuple,
        client_id: Optional[str] = None,
        provider_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Booking]:
        """Future bookings in the given statuses, soonest first"""
        query = db.query(Booking).filter(Booking.date > now, Booking.status.in_(statuses))
        if client_id:
            query = query.filter(Booking.client_id == client_id)
        if provider_id:
            query = query.filter(Booking.provider_id == provider_id)
        query = query.order_by(Booking.date.asc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def count_bookings(
        db: Session,
        client_id: Optional[str] = None,
        provider_id: Optional[str] = None,
        statuses: Optional[tuple] = None,
    ) -> int:
        query = db.query(Booking)
        if client_id:
            query = query.filter(Booking.client_id == client_id)
        if provider_id:
            query = query.filter(Booking.provider_id == provider_id)
        if statuses:
            query = query.filter(Booking.status.in_(statuses))
        return query.count()

    @staticmethod
    def distinct_clients(db: Session, provider_id: str, statuses: tuple) -> int:
        return (
            db.query(Booking.client_id)
            .filter(Booking.provider_id == provider_id, Booking.status.in_(statuses))
            .distinct()
            .count()
        )

    @staticmethod
    def completed_for_client(db: Session, client_id: str, service_id: Optional[str] = None) -> list[Booking]:
        query = db.query(Booking).filter(
            Booking.client_id == client_id, Booking.status == "completed"
        )
        if service_id:
            query = query.filter(Booking.service_id == service_id)
        return query.order_by(Booking.completed_at.desc()).all()
