"""Contact form schemas"""

from datetime import datetime

from pydantic import BaseModel, field_validator

from ...models import ContactSubmission
from ...shared.validators import validate_email, validate_required_text


class ContactCreate(BaseModel):
    name: str
    email: str
    subject: str
    message: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return validate_required_text(v, "Name")

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return validate_required_text(validate_email(v), "Email")

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, v: str) -> str:
        return validate_required_text(v, "Subject")

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        return validate_required_text(v, "Message", max_length=5000)


class ContactResponse(BaseModel):
    id: str
    name: str
    email: str
    subject: str
    message: str
    status: str
    createdAt: datetime

    @classmethod
    def from_model(cls, submission: ContactSubmission) -> "ContactResponse":
        return cls(
            id=submission.id,
            name=submission.name,
            email=submission.email,
            subject=submission.subject,
            message=submission.message,
            status=submission.status,
            createdAt=submission.created_at,
        )
