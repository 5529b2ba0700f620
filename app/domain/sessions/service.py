"""Session service - Business logic for coaching session operations"""

import logging
from typing import Optional, Union

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Client, CoachingSession, Profile
from ...plan_limits import ensure_can_add_entry
from ...utils.export_utils import (
    SESSION_HEADERS,
    XLSX_MEDIA_TYPE,
    build_csv,
    build_icf_log_xlsx,
    build_xlsx,
    export_filename,
    file_response,
    session_row,
)
from ...utils.number_utils import parse_number_from_locale
from .repository import SessionRepository
from .schemas import SessionCreate, SessionUpdate

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "xlsx")


def parse_amount(value: Union[float, str, None], country: Optional[str]) -> Optional[float]:
    """Numbers pass through; strings are read in the country's number format"""
    if value is None or isinstance(value, (int, float)):
        return value
    amount, error = parse_number_from_locale(value, country)
    if error:
        raise HTTPException(status_code=400, detail=f"Invalid payment amount: {error}")
    return amount


class SessionService:
    """Service layer for coaching session business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SessionRepository()

    def get_sessions(self, user: Profile) -> list[CoachingSession]:
        return self.repo.get_sessions(self.db, user.user_id)

    def get_session(self, session_id: int, user: Profile) -> CoachingSession:
        session = self.repo.get_session_by_id(self.db, session_id, user.user_id)
        if not session:
            raise HTTPException(status_code=404, detail="Session not found")
        return session

    def _get_owned_client(self, client_id: int, user: Profile) -> Client:
        client = (
            self.db.query(Client)
            .filter(Client.id == client_id, Client.user_id == user.user_id)
            .first()
        )
        if not client:
            raise HTTPException(status_code=404, detail="Client not found")
        return client

    def create_session(self, data: SessionCreate, user: Profile) -> CoachingSession:
        ensure_can_add_entry(user, self.db)

        session_data = data.model_dump()
        if data.client_id is not None:
            client = self._get_owned_client(data.client_id, user)
            session_data["client_name"] = data.client_name or client.name
        if not session_data.get("client_name"):
            raise HTTPException(status_code=400, detail="Client name is required")

        session_data["payment_amount"] = parse_amount(data.payment_amount, user.country)

        session = self.repo.create_session(self.db, user.user_id, **session_data)
        logger.info(f"✅ Session {session.id} logged for user {user.user_id}")
        return session

    def update_session(self, session_id: int, data: SessionUpdate, user: Profile) -> CoachingSession:
        session = self.get_session(session_id, user)
        updates = data.model_dump(exclude_unset=True)

        if updates.get("client_id") is not None:
            client = self._get_owned_client(updates["client_id"], user)
            if not updates.get("client_name"):
                updates["client_name"] = client.name
        if "client_name" in updates and not updates["client_name"]:
            updates.pop("client_name")
        for field in ("date", "duration"):
            if field in updates and updates[field] is None:
                updates.pop(field)
        if "payment_amount" in updates:
            updates["payment_amount"] = parse_amount(updates["payment_amount"], user.country)

        return self.repo.update_session(self.db, session, **updates)

    def delete_session(self, session_id: int, user: Profile) -> None:
        session = self.get_session(session_id, user)
        self.repo.delete_session(self.db, session)
        logger.info(f"🗑️ Deleted session {session_id} for user {user.user_id}")

    # ===================================
    # EXPORTS
    # ===================================

    def export_sessions(self, user: Profile, export_format: str):
        if export_format not in EXPORT_FORMATS:
            raise HTTPException(status_code=400, detail="Format must be csv or xlsx")

        rows = [session_row(s) for s in self.repo.get_sessions(self.db, user.user_id)]
        logger.info(f"📤 Exporting {len(rows)} sessions as {export_format} for user {user.user_id}")

        if export_format == "csv":
            return file_response(
                build_csv(SESSION_HEADERS, rows),
                export_filename("coaching_sessions", "csv"),
                "text/csv",
            )
        return file_response(
            build_xlsx("Sessions Data", SESSION_HEADERS, rows),
            export_filename("coaching_sessions", "xlsx"),
            XLSX_MEDIA_TYPE,
        )

    def export_icf_log(self, user: Profile):
        sessions = self.repo.get_sessions_with_clients(self.db, user.user_id)
        logger.info(f"📤 Building ICF coaching log with {len(sessions)} sessions for user {user.user_id}")
        return file_response(
            build_icf_log_xlsx(sessions),
            export_filename("icf_client_coaching_log", "xlsx"),
            XLSX_MEDIA_TYPE,
        )
