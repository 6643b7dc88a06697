"""Review domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import Review


def _clean_comment(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if len(v) > 2000:
        raise ValueError("Comment exceeds maximum length of 2000 characters")
    return v


class ReviewCreate(BaseModel):
    serviceId: str
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""
    bookingId: Optional[str] = None

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v: str) -> str:
        return _clean_comment(v) or ""


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = None

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v):
        return _clean_comment(v)


class ReviewResponse(BaseModel):
    id: str
    serviceId: str
    serviceName: Optional[str] = None
    providerId: str
    providerName: Optional[str] = None
    clientId: str
    clientName: Optional[str] = None
    bookingId: Optional[str] = None
    rating: int
    comment: str
    createdAt: datetime
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, review: Review) -> "ReviewResponse":
        return cls(
            id=review.id,
            serviceId=review.service_id,
            serviceName=review.service_name,
            providerId=review.provider_id,
            providerName=review.provider_name,
            clientId=review.client_id,
            clientName=review.client_name,
            bookingId=review.booking_id,
            rating=review.rating,
            comment=review.comment or "",
            createdAt=review.created_at,
            updatedAt=review.updated_at,
        )


class ProviderRatingResponse(BaseModel):
    providerId: str
    averageRating: float
    reviewCount: int
