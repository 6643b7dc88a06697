"""Booking domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import Booking
from ...shared.timestamps import to_naive_utc

PAYMENT_METHODS = ("card", "cash", "paypal", "bank_transfer")


class BookingCreate(BaseModel):
    """Schema for booking a service"""

    serviceId: str
    date: datetime
    address: Optional[str] = None
    notes: Optional[str] = None
    paymentMethod: str = "card"

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @field_validator("paymentMethod")
    @classmethod
    def validate_payment_method(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in PAYMENT_METHODS:
            raise ValueError(f"Invalid payment method. Allowed: {', '.join(PAYMENT_METHODS)}")
        return v

    @field_validator("address", "notes")
    @classmethod
    def strip_text(cls, v):
        if v is None:
            return v
        v = v.strip()
        if len(v) > 2000:
            raise ValueError("Text exceeds maximum length of 2000 characters")
        return v or None


class BookingCancel(BaseModel):
    reason: Optional[str] = None


class BookingResponse(BaseModel):
    id: str
    serviceId: str
    serviceName: str
    providerId: str
    providerName: Optional[str] = None
    businessName: Optional[str] = None
    clientId: str
    clientName: Optional[str] = None
    clientEmail: Optional[str] = None
    price: float
    fee: float
    total: float
    duration: int
    date: datetime
    status: str
    address: Optional[str] = None
    notes: Optional[str] = None
    reason: Optional[str] = None
    paymentStatus: Optional[str] = None
    createdAt: datetime
    updatedAt: datetime
    startedAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            serviceId=booking.service_id,
            serviceName=booking.service_name,
            providerId=booking.provider_id,
            providerName=booking.provider_name,
            businessName=booking.business_name,
            clientId=booking.client_id,
            clientName=booking.client_name,
            clientEmail=booking.client_email,
            price=booking.price,
            fee=booking.fee,
            total=booking.total,
            duration=booking.duration,
            date=booking.date,
            status=booking.status,
            address=booking.address,
            notes=booking.notes,
            reason=booking.reason,
            paymentStatus=booking.payment.status if booking.payment else None,
            createdAt=booking.created_at,
            updatedAt=booking.updated_at,
            startedAt=booking.started_at,
            completedAt=booking.completed_at,
        )
