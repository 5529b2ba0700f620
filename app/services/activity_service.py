"""Per-coach activity numbers used in reminder emails and placeholders"""

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import CoachingSession, CPDEntry


def get_user_activity_stats(db: Session, user_id: str) -> dict:
    """
    Returns:
        last_activity_date: date of the latest coaching session (None if none)
        session_count: number of coaching sessions
        cpd_hours: CPD hours counted towards ICF CCE, rounded to 1 decimal
    """
    last_session, session_count = (
        db.query(func.max(CoachingSession.date), func.count(CoachingSession.id))
        .filter(CoachingSession.user_id == user_id)
        .one()
    )

    cpd_hours = (
        db.query(func.coalesce(func.sum(CPDEntry.hours), 0))
        .filter(CPDEntry.user_id == user_id, CPDEntry.icf_cce_hours.isnot(False))
        .scalar()
    )

    return {
        "last_activity_date": last_session,
        "session_count": session_count or 0,
        "cpd_hours": round(float(cpd_hours or 0), 1),
    }
