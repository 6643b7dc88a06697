"""Contact service - Stores messages sent through the public contact form"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import ContactSubmission
from .repository import ContactRepository
from .schemas import ContactCreate

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ContactRepository()

    def submit(self, data: ContactCreate) -> ContactSubmission:
        try:
            submission = self.repo.create_submission(
                self.db,
                name=data.name,
                email=data.email,
                subject=data.subject,
                message=data.message,
                status="new",
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to store contact submission from {data.email}: {e}")
            raise HTTPException(status_code=500, detail="Failed to send message") from e

        logger.info(f"📬 Contact submission {submission.id}: {data.subject}")
        return submission

    def list_submissions(self) -> list[ContactSubmission]:
        return self.repo.list_submissions(self.db)
