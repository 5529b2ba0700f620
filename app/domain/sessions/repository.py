"""Session repository - Database operations for coaching sessions"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import CoachingSession


class SessionRepository:
    @staticmethod
    def get_sessions(db: Session, user_id: str) -> list[CoachingSession]:
        return (
            db.query(CoachingSession)
            .filter(CoachingSession.user_id == user_id)
            .order_by(CoachingSession.date.desc())
            .all()
        )

    @staticmethod
    def get_sessions_with_clients(db: Session, user_id: str) -> list[CoachingSession]:
        """Sessions oldest first with the linked client loaded, for log exports"""
        return (
            db.query(CoachingSession)
            .options(joinedload(CoachingSession.client))
            .filter(CoachingSession.user_id == user_id)
            .order_by(CoachingSession.date.asc())
            .all()
        )

    @staticmethod
    def get_session_by_id(db: Session, session_id: int, user_id: str) -> Optional[CoachingSession]:
        return (
            db.query(CoachingSession)
            .filter(CoachingSession.id == session_id, CoachingSession.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_by_invitee_uri(db: Session, invitee_uri: str) -> Optional[CoachingSession]:
        return (
            db.query(CoachingSession)
            .filter(CoachingSession.calendly_invitee_uri == invitee_uri)
            .first()
        )

    @staticmethod
    def create_session(db: Session, user_id: str, **session_data) -> CoachingSession:
        session = CoachingSession(user_id=user_id, **session_data)
        db.add(session)
        db.commit()
        db.refresh(session)
        return session

    @staticmethod
    def update_session(db: Session, session: CoachingSession, **updates) -> CoachingSession:
        for key, value in updates.items():
            if hasattr(session, key):
                setattr(session, key, value)
        db.commit()
        db.refresh(session)
        return session

    @staticmethod
    def delete_session(db: Session, session: CoachingSession) -> None:
        db.delete(session)
        db.commit()
