"""Mentoring service - Business logic for mentoring and supervision sessions"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import MentoringSession, Profile
from .repository import MentoringRepository
from .schemas import (
    MENTORING_ONLY_FIELDS,
    SUPERVISION_ONLY_FIELDS,
    MentoringCreate,
    MentoringUpdate,
    duration_in_minutes,
)

logger = logging.getLogger(__name__)


def clear_fields_for_type(data: dict, session_type: str) -> dict:
    """Null out the fields that belong to the other session type"""
    other = SUPERVISION_ONLY_FIELDS if session_type == "mentoring" else MENTORING_ONLY_FIELDS
    for field in other:
        data[field] = None
    return data


class MentoringService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = MentoringRepository()

    def get_sessions(self, user: Profile) -> list[MentoringSession]:
        return self.repo.get_sessions(self.db, user.user_id)

    def get_session(self, session_id: int, user: Profile) -> MentoringSession:
        session = self.repo.get_session_by_id(self.db, session_id, user.user_id)
        if not session:
            raise HTTPException(status_code=404, detail="Mentoring session not found")
        return session

    def create_session(self, data: MentoringCreate, user: Profile) -> MentoringSession:
        session_data = data.model_dump(exclude={"duration_unit"})
        session_data["duration"] = duration_in_minutes(data.duration, data.duration_unit)
        clear_fields_for_type(session_data, data.session_type)

        session = self.repo.create_session(self.db, user.user_id, **session_data)
        logger.info(
            f"✅ {data.session_type.capitalize()} session {session.id} logged for user {user.user_id}"
        )
        return session

    def update_session(self, session_id: int, data: MentoringUpdate, user: Profile) -> MentoringSession:
        session = self.get_session(session_id, user)
        updates = data.model_dump(exclude_unset=True, exclude={"duration_unit"})

        for required in ("session_type", "session_date", "duration"):
            if required in updates and updates[required] is None:
                updates.pop(required)
        if "duration" in updates:
            updates["duration"] = duration_in_minutes(updates["duration"], data.duration_unit)

        clear_fields_for_type(updates, updates.get("session_type", session.session_type))
        return self.repo.update_session(self.db, session, **updates)

    def delete_session(self, session_id: int, user: Profile) -> None:
        session = self.get_session(session_id, user)
        self.repo.delete_session(self.db, session)
        logger.info(f"🗑️ Deleted mentoring session {session_id} for user {user.user_id}")
