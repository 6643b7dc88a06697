"""Catalog domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...models import Service
from ...shared.validators import validate_category, validate_price, validate_required_text

ServiceStatus = Literal["active", "draft", "archived"]
SortOption = Literal["relevance", "newest", "price_asc", "price_desc", "rating_desc"]
DurationBucket = Literal["short", "medium", "long"]


class ServiceCreate(BaseModel):
    """Schema for creating a service listing"""

    name: str
    description: str = ""
    price: float
    duration: int
    category: str
    status: ServiceStatus = "active"

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return validate_required_text(v, "Service name")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        v = (v or "").strip()
        if len(v) > 5000:
            raise ValueError("Description exceeds maximum length of 5000 characters")
        return v

    @field_validator("price")
    @classmethod
    def validate_price_field(cls, v: float) -> float:
        return validate_price(v)

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Duration must be a positive number of minutes")
        return v

    @field_validator("category")
    @classmethod
    def validate_category_field(cls, v: str) -> str:
        return validate_category(v)


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    duration: Optional[int] = None
    category: Optional[str] = None
    status: Optional[ServiceStatus] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None:
            return validate_required_text(v, "Service name")
        return v

    @field_validator("price")
    @classmethod
    def validate_price_field(cls, v):
        return validate_price(v)

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Duration must be a positive number of minutes")
        return v

    @field_validator("category")
    @classmethod
    def validate_category_field(cls, v):
        if v is not None:
            return validate_category(v)
        return v


class ServiceResponse(BaseModel):
    id: str
    name: str
    description: str
    price: float
    duration: int
    category: str
    providerId: str
    providerName: Optional[str] = None
    businessName: Optional[str] = None
    status: str
    rating: Optional[float] = None
    reviewCount: int = 0
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_model(cls, service: Service) -> "ServiceResponse":
        return cls(
            id=service.id,
            name=service.name,
            description=service.description,
            price=service.price,
            duration=service.duration,
            category=service.category,
            providerId=service.provider_id,
            providerName=service.provider_name,
            businessName=service.business_name,
            status=service.status,
            rating=service.rating,
            reviewCount=service.review_count or 0,
            createdAt=service.created_at,
            updatedAt=service.updated_at,
        )


class ServicePage(BaseModel):
    items: list[ServiceResponse]
    page: int
    pageSize: int
    hasMore: bool


class CategoryResponse(BaseModel):
    value: str
    label: str
