"""Booking service - Booking creation and status lifecycle"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...config import BOOKINGS_PAGE_SIZE
from ...models import Booking
from ...shared.timestamps import utcnow
from ..catalog.repository import CatalogRepository
from .lifecycle import (
    CANCELLED,
    PENDING,
    InvalidTransition,
    compute_pricing,
    next_status,
    tab_criteria,
)
from .repository import BookingRepository
from .schemas import BookingCreate

logger = logging.getLogger(__name__)

# Payment follows its booking on cancellation: (from, to)
CANCEL_PAYMENT_TRANSITIONS = (("pending", "failed"), ("paid", "refunded"))


class BookingService:
    """Service layer for bookings"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()
        self.catalog = CatalogRepository()

    @staticmethod
    def _is_party(booking: Booking, session: AuthSession) -> bool:
        return session.uid in (booking.client_id, booking.provider_id)

    def get_booking(self, booking_id: str, session: AuthSession) -> Booking:
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        if not session.is_admin and not self._is_party(booking, session):
            logger.warning(f"🚫 {session.uid} tried to access booking {booking_id}")
            raise HTTPException(status_code=403, detail="Access denied to this booking")
        return booking

    def create_booking(self, data: BookingCreate, session: AuthSession) -> Booking:
        """Write the booking and its pending payment together"""
        if not (session.is_client or session.is_admin):
            raise HTTPException(status_code=403, detail="Only clients can book services")

        service = self.catalog.get_service(self.db, data.serviceId)
        if not service:
            raise HTTPException(status_code=404, detail="Service not found")
        if service.status != "active":
            raise HTTPException(status_code=400, detail="This service is not available for booking")

        fee, total = compute_pricing(service.price)
        now = utcnow()

        booking_data = {
            "service_id": service.id,
            "service_name": service.name,
            "provider_id": service.provider_id,
            "provider_name": service.provider_name,
            "business_name": service.business_name,
            "client_id": session.uid,
            "client_name": session.display_name,
            "client_email": session.email,
            "price": service.price,
            "fee": float(fee),
            "total": float(total),
            "duration": service.duration,
            "date": data.date,
            "status": PENDING,
            "address": data.address,
            "notes": data.notes,
            "created_at": now,
            "updated_at": now,
        }
        payment_data = {
            "service_id": service.id,
            "service_name": service.name,
            "provider_id": service.provider_id,
            "provider_name": service.provider_name,
            "client_id": session.uid,
            "amount": float(total),
            "status": "pending",
            "method": data.paymentMethod,
            "date": now,
            "created_at": now,
            "updated_at": now,
        }

        try:
            booking = self.repo.create_booking_with_payment(self.db, booking_data, payment_data)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create booking for service {service.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create booking") from e

        logger.info(f"✅ Booking created: {booking.id} ({service.name}, total {total})")
        return booking

    def _apply_transition(self, booking: Booking, action: str, **extra_updates) -> Booking:
        """
        Move the booking along the transition table with a conditional write:
        the row is only updated while it still has the status that was read.
        """
        current = booking.status
        try:
            target = next_status(current, action)
        except InvalidTransition as e:
            logger.warning(f"⚠️ Rejected {action} on booking {booking.id}: {e}")
            raise HTTPException(status_code=409, detail=str(e)) from e

        now = utcnow()
        try:
            changed = self.repo.update_if_status(
                self.db, booking.id, current, status=target, updated_at=now, **extra_updates
            )
            if not changed:
                self.db.rollback()
                return self._resolve_lost_race(booking.id, action)

            if action == "cancel":
                for source, destination in CANCEL_PAYMENT_TRANSITIONS:
                    if self.repo.update_payment_if_status(
                        self.db, booking.id, source, status=destination, updated_at=now
                    ):
                        logger.info(f"💳 Payment for booking {booking.id}: {source} → {destination}")
                        break

            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to {action} booking {booking.id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to {action} booking") from e

        self.db.expire_all()
        logger.info(f"✅ Booking {booking.id}: {current} → {target}")
        return self.repo.get_booking(self.db, booking.id)

    def _resolve_lost_race(self, booking_id: str, action: str) -> Booking:
        self.db.expire_all()
        booking = self.repo.get_booking(self.db, booking_id)
        if booking and action == "cancel" and booking.status == CANCELLED:
            logger.info(f"ℹ️ Booking {booking_id} was cancelled concurrently")
            return booking
        logger.warning(f"⚠️ Booking {booking_id} changed while trying to {action}")
        raise HTTPException(
            status_code=409, detail="Booking was modified by another request. Please reload."
        )

    def confirm_booking(self, booking_id: str, session: AuthSession) -> Booking:
        booking = self.get_booking(booking_id, session)
        if booking.provider_id != session.uid and not session.is_admin:
            raise HTTPException(status_code=403, detail="Only the provider can confirm this booking")
        return self._apply_transition(booking, "confirm")

    def start_service(self, booking_id: str, session: AuthSession) -> Booking:
        booking = self.get_booking(booking_id, session)
        if booking.provider_id != session.uid and not session.is_admin:
            raise HTTPException(status_code=403, detail="Only the provider can start this service")
        return self._apply_transition(booking, "start", started_at=utcnow())

    def complete_service(self, booking_id: str, session: AuthSession) -> Booking:
        booking = self.get_booking(booking_id, session)
        return self._apply_transition(booking, "complete", completed_at=utcnow())

    def cancel_booking(
        self, booking_id: str, session: AuthSession, reason: Optional[str] = None
    ) -> Booking:
        """Either party may cancel; cancelling twice is a no-op"""
        booking = self.get_booking(booking_id, session)
        if booking.status == CANCELLED:
            logger.info(f"ℹ️ Booking {booking_id} already cancelled")
            return booking
        reason = reason.strip() if reason else None
        return self._apply_transition(booking, "cancel", reason=reason)

    def list_bookings(
        self, session: AuthSession, tab: str = "all", search: Optional[str] = None
    ) -> list[Booking]:
        try:
            statuses, date_from = tab_criteria(tab)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        client_id = provider_id = None
        if session.is_provider:
            provider_id = session.uid
        elif session.is_client:
            client_id = session.uid

        return self.repo.list_bookings(
            self.db,
            client_id=client_id,
            provider_id=provider_id,
            statuses=statuses,
            date_from=date_from,
            search=search,
            limit=BOOKINGS_PAGE_SIZE,
        )
