"""Mentoring repository - Database operations for mentoring and supervision sessions"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import MentoringSession


class MentoringRepository:
    @staticmethod
    def get_sessions(db: Session, user_id: str) -> list[MentoringSession]:
        return (
            db.query(MentoringSession)
            .filter(MentoringSession.user_id == user_id)
            .order_by(MentoringSession.session_date.desc())
            .all()
        )

    @staticmethod
    def get_session_by_id(db: Session, session_id: int, user_id: str) -> Optional[MentoringSession]:
        return (
            db.query(MentoringSession)
            .filter(MentoringSession.id == session_id, MentoringSession.user_id == user_id)
            .first()
        )

    @staticmethod
    def create_session(db: Session, user_id: str, **data) -> MentoringSession:
        session = MentoringSession(user_id=user_id, **data)
        db.add(session)
        db.commit()
        db.refresh(session)
        return session

    @staticmethod
    def update_session(db: Session, session: MentoringSession, **updates) -> MentoringSession:
        for key, value in updates.items():
            if hasattr(session, key):
                setattr(session, key, value)
        db.commit()
        db.refresh(session)
        return session

    @staticmethod
    def delete_session(db: Session, session: MentoringSession) -> None:
        db.delete(session)
        db.commit()
