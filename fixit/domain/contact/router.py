"""Contact router - Public contact form"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import AuthSession, require_role
from ...database import get_db
from ...rate_limiter import create_rate_limiter
from .schemas import ContactCreate, ContactResponse
from .service import ContactService

router = APIRouter(prefix="/contact", tags=["Contact"])

rate_limit_contact = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="contact")


def get_contact_service(db: Session = Depends(get_db)) -> ContactService:
    return ContactService(db)


@router.post("", status_code=201)
async def submit_contact_form(
    data: ContactCreate,
    service: ContactService = Depends(get_contact_service),
    _: None = Depends(rate_limit_contact),
):
    submission = service.submit(data)
    return {"id": submission.id, "message": "Thanks for reaching out. We will get back to you soon."}


@router.get("", response_model=list[ContactResponse])
async def list_contact_submissions(
    _: AuthSession = Depends(require_role("admin")),
    service: ContactService = Depends(get_contact_service),
):
    return [ContactResponse.from_model(s) for s in service.list_submissions()]


__all__ = ["router"]
