"""Payment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

from ...models import Payment

PaymentStatus = Literal["pending", "paid", "refunded", "failed"]


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus


class PaymentResponse(BaseModel):
    id: str
    bookingId: str
    serviceId: str
    serviceName: Optional[str] = None
    providerId: str
    providerName: Optional[str] = None
    clientId: str
    amount: float
    status: str
    method: Optional[str] = None
    date: datetime
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_model(cls, payment: Payment) -> "PaymentResponse":
        return cls(
            id=payment.id,
            bookingId=payment.booking_id,
            serviceId=payment.service_id,
            serviceName=payment.service_name,
            providerId=payment.provider_id,
            providerName=payment.provider_name,
            clientId=payment.client_id,
            amount=payment.amount,
            status=payment.status,
            method=payment.method,
            date=payment.date,
            createdAt=payment.created_at,
            updatedAt=payment.updated_at,
        )


class PaymentSummaryResponse(BaseModel):
    """Client fields are set for clients, totalRevenue for providers, all three for admins"""

    totalSpent: Optional[float] = None
    upcomingTotal: Optional[float] = None
    totalRevenue: Optional[float] = None
