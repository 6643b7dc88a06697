"""User domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator, model_validator

from ...models import User
from ...shared.validators import validate_email, validate_required_text, validate_us_phone


class SignupRequest(BaseModel):
    """Schema for creating an identity and its profile"""

    email: str
    password: str
    confirmPassword: Optional[str] = None
    displayName: str
    role: Literal["client", "provider"] = "client"
    businessName: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @field_validator("displayName")
    @classmethod
    def validate_display_name(cls, v: str) -> str:
        return validate_required_text(v, "Display name")

    @model_validator(mode="after")
    def check_signup(self):
        if self.confirmPassword is not None and self.confirmPassword != self.password:
            raise ValueError("Passwords do not match")
        if self.role == "provider" and not (self.businessName or "").strip():
            raise ValueError("Business name is required for providers")
        return self


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return validate_email(v)


class ProfileCreate(BaseModel):
    """Profile for an identity created directly with the Firebase SDK"""

    displayName: str
    role: Literal["client", "provider"] = "client"
    businessName: Optional[str] = None

    @field_validator("displayName")
    @classmethod
    def validate_display_name(cls, v: str) -> str:
        return validate_required_text(v, "Display name")

    @model_validator(mode="after")
    def check_business_name(self):
        if self.role == "provider" and not (self.businessName or "").strip():
            raise ValueError("Business name is required for providers")
        return self


class ProfileUpdate(BaseModel):
    """Role and email are immutable; only profile fields can change"""

    displayName: Optional[str] = None
    businessName: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    bio: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_us_phone(v)
        return v


class UserResponse(BaseModel):
    id: str
    email: str
    displayName: Optional[str]
    role: str
    businessName: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    bio: Optional[str] = None
    createdAt: datetime

    @classmethod
    def from_model(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            displayName=user.display_name,
            role=user.role,
            businessName=user.business_name,
            phone=user.phone,
            address=user.address,
            bio=user.bio,
            createdAt=user.created_at,
        )


class PublicProfileResponse(BaseModel):
    id: str
    displayName: Optional[str]
    role: str
    businessName: Optional[str] = None
    bio: Optional[str] = None
    createdAt: datetime

    @classmethod
    def from_model(cls, user: User) -> "PublicProfileResponse":
        return cls(
            id=user.id,
            displayName=user.display_name,
            role=user.role,
            businessName=user.business_name,
            bio=user.bio,
            createdAt=user.created_at,
        )


class SessionResponse(BaseModel):
    idToken: str
    refreshToken: Optional[str] = None
    expiresIn: int
    user: UserResponse
