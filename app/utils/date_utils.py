from datetime import datetime
from typing import Optional

from dateutil import parser as date_parser
from dateutil import tz
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import CoachingSession, CPDEntry, MentoringSession


def get_most_recent_entry_date(db: Session, user_id: str) -> Optional[datetime]:
    """
    Date of the user's latest logged activity.

    Sessions win over CPD, CPD over mentoring: the first table that has any
    entry decides.
    """
    for column, owner in (
        (CoachingSession.date, CoachingSession.user_id),
        (CPDEntry.activity_date, CPDEntry.user_id),
        (MentoringSession.session_date, MentoringSession.user_id),
    ):
        latest = db.query(func.max(column)).filter(owner == user_id).scalar()
        if latest:
            return latest
    return None


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp ("Z" allowed) into a naive UTC datetime"""
    if not value:
        return None
    return to_naive_utc(date_parser.isoparse(value))


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Offset-aware datetimes are converted to UTC; naive ones are assumed UTC already"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(tz.UTC).replace(tzinfo=None)
