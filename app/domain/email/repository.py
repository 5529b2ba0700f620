"""Admin email repository - scheduled email rows and recipient lookups"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Profile, ScheduledEmail


class EmailRepository:
    @staticmethod
    def create_scheduled_email(db: Session, **data) -> ScheduledEmail:
        scheduled = ScheduledEmail(**data)
        db.add(scheduled)
        db.commit()
        db.refresh(scheduled)
        return scheduled

    @staticmethod
    def get_scheduled_emails(db: Session) -> list[ScheduledEmail]:
        return db.query(ScheduledEmail).order_by(ScheduledEmail.created_at.desc(), ScheduledEmail.id.desc()).all()

    @staticmethod
    def get_scheduled_email(db: Session, email_id: int) -> Optional[ScheduledEmail]:
        return db.query(ScheduledEmail).filter(ScheduledEmail.id == email_id).first()

    @staticmethod
    def get_due_emails(db: Session, now: datetime) -> list[ScheduledEmail]:
        return (
            db.query(ScheduledEmail)
            .filter(ScheduledEmail.status == "pending", ScheduledEmail.scheduled_for <= now)
            .order_by(ScheduledEmail.scheduled_for.asc())
            .all()
        )

    @staticmethod
    def get_recipients(db: Session, user_ids: Optional[list[str]] = None) -> list[Profile]:
        """Profiles with an email address; all of them when user_ids is None"""
        query = db.query(Profile).filter(Profile.email.isnot(None), Profile.email != "")
        if user_ids is not None:
            query = query.filter(Profile.user_id.in_(user_ids))
        return query.all()

    @staticmethod
    def mark_result(db: Session, scheduled: ScheduledEmail, **fields) -> ScheduledEmail:
        for key, value in fields.items():
            setattr(scheduled, key, value)
        db.commit()
        return scheduled
