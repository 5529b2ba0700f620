"""Admin repository - cross-user queries for the admin dashboard"""

from datetime import datetime
from typing import Optional

from sqlalchemy import distinct, func, or_
from sqlalchemy.orm import Session

from ...models import CoachingSession, CPDEntry, Profile


class AdminRepository:
    @staticmethod
    def get_profiles(db: Session, search: Optional[str] = None) -> list[Profile]:
        query = db.query(Profile)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(
                or_(func.lower(Profile.name).like(pattern), func.lower(Profile.email).like(pattern))
            )
        return query.order_by(Profile.created_at.desc()).all()

    @staticmethod
    def get_profile(db: Session, user_id: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.user_id == user_id).first()

    @staticmethod
    def session_totals_by_user(db: Session) -> dict[str, tuple[int, int]]:
        """user_id -> (session count, total minutes)"""
        rows = (
            db.query(
                CoachingSession.user_id,
                func.count(CoachingSession.id),
                func.coalesce(func.sum(CoachingSession.duration), 0),
            )
            .group_by(CoachingSession.user_id)
            .all()
        )
        return {user_id: (count, minutes) for user_id, count, minutes in rows}

    @staticmethod
    def cpd_counts_by_user(db: Session) -> dict[str, int]:
        rows = db.query(CPDEntry.user_id, func.count(CPDEntry.id)).group_by(CPDEntry.user_id).all()
        return dict(rows)

    @staticmethod
    def recent_sessions(db: Session, user_id: str, limit: int = 10) -> list[CoachingSession]:
        return (
            db.query(CoachingSession)
            .filter(CoachingSession.user_id == user_id)
            .order_by(CoachingSession.date.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def recent_cpd(db: Session, user_id: str, limit: int = 10) -> list[CPDEntry]:
        return (
            db.query(CPDEntry)
            .filter(CPDEntry.user_id == user_id)
            .order_by(CPDEntry.activity_date.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def count_active_users(db: Session, since: datetime) -> int:
        return (
            db.query(func.count(distinct(CoachingSession.user_id)))
            .filter(CoachingSession.date >= since)
            .scalar()
            or 0
        )

    @staticmethod
    def count_profiles_created_between(db: Session, start: datetime, end: Optional[datetime] = None) -> int:
        query = db.query(func.count(Profile.id)).filter(Profile.created_at >= start)
        if end is not None:
            query = query.filter(Profile.created_at < end)
        return query.scalar() or 0
