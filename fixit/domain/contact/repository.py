"""Contact repository - Database operations for contact form submissions"""

from sqlalchemy.orm import Session

from ...models import ContactSubmission


class ContactRepository:
    @staticmethod
    def create_submission(db: Session, **submission_data) -> ContactSubmission:
        submission = ContactSubmission(**submission_data)
        db.add(submission)
        db.commit()
        db.refresh(submission)
        return submission

    @staticmethod
    def list_submissions(db: Session) -> list[ContactSubmission]:
        return db.query(ContactSubmission).order_by(ContactSubmission.created_at.desc()).all()
