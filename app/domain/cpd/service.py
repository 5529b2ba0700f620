"""CPD service - Business logic for CPD entries"""

import logging
from typing import Optional, Union

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import CPDEntry, Profile
from ...plan_limits import ensure_can_add_entry
from ...utils.export_utils import (
    CPD_HEADERS,
    XLSX_MEDIA_TYPE,
    build_csv,
    build_xlsx,
    cpd_row,
    export_filename,
    file_response,
)
from ...utils.number_utils import parse_number_from_locale
from .repository import CPDRepository
from .schemas import CPDCreate, CPDUpdate

logger = logging.getLogger(__name__)


def parse_hours(value: Union[float, str, None], country: Optional[str]) -> Optional[float]:
    if value is None or isinstance(value, (int, float)):
        hours = value
    else:
        hours, error = parse_number_from_locale(value, country)
        if error:
            raise HTTPException(status_code=400, detail=f"Invalid hours: {error}")
    if hours is not None and hours < 0:
        raise HTTPException(status_code=400, detail="Hours cannot be negative")
    return hours


class CPDService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CPDRepository()

    def get_entries(self, user: Profile) -> list[CPDEntry]:
        return self.repo.get_entries(self.db, user.user_id)

    def get_entry(self, entry_id: int, user: Profile) -> CPDEntry:
        entry = self.repo.get_entry_by_id(self.db, entry_id, user.user_id)
        if not entry:
            raise HTTPException(status_code=404, detail="CPD entry not found")
        return entry

    def create_entry(self, data: CPDCreate, user: Profile) -> CPDEntry:
        ensure_can_add_entry(user, self.db)

        entry_data = data.model_dump()
        if not entry_data.get("title"):
            raise HTTPException(status_code=400, detail="Title is required")
        entry_data["hours"] = parse_hours(data.hours, user.country)
        if entry_data["hours"] is None:
            raise HTTPException(status_code=400, detail="Hours are required")

        entry = self.repo.create_entry(self.db, user.user_id, **entry_data)
        logger.info(f"✅ CPD entry {entry.id} logged for user {user.user_id} ({entry.hours}h)")
        return entry

    def update_entry(self, entry_id: int, data: CPDUpdate, user: Profile) -> CPDEntry:
        entry = self.get_entry(entry_id, user)
        updates = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            # Required columns keep their value when blanked
            if not (key in ("title", "activity_date", "hours", "icf_cce_hours") and value is None)
        }
        if "hours" in updates:
            updates["hours"] = parse_hours(updates["hours"], user.country)
        return self.repo.update_entry(self.db, entry, **updates)

    def delete_entry(self, entry_id: int, user: Profile) -> None:
        entry = self.get_entry(entry_id, user)
        self.repo.delete_entry(self.db, entry)
        logger.info(f"🗑️ Deleted CPD entry {entry_id} for user {user.user_id}")

    def get_summary(self, user: Profile) -> dict:
        total, cce, count = self.repo.get_hour_totals(self.db, user.user_id)
        return {
            "total_hours": round(total, 1),
            "icf_cce_hours": round(cce, 1),
            "entry_count": count,
        }

    def export_entries(self, user: Profile, export_format: str):
        if export_format not in ("csv", "xlsx"):
            raise HTTPException(status_code=400, detail="Format must be csv or xlsx")

        rows = [cpd_row(e) for e in self.repo.get_entries(self.db, user.user_id)]
        logger.info(f"📤 Exporting {len(rows)} CPD entries as {export_format} for user {user.user_id}")

        if export_format == "csv":
            return file_response(build_csv(CPD_HEADERS, rows), export_filename("cpd_activities", "csv"), "text/csv")
        return file_response(
            build_xlsx("CPD Data", CPD_HEADERS, rows),
            export_filename("cpd_activities", "xlsx"),
            XLSX_MEDIA_TYPE,
        )
