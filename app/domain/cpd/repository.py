"""CPD repository - Database operations for CPD entries"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import CPDEntry


class CPDRepository:
    @staticmethod
    def get_entries(db: Session, user_id: str) -> list[CPDEntry]:
        return (
            db.query(CPDEntry)
            .filter(CPDEntry.user_id == user_id)
            .order_by(CPDEntry.activity_date.desc())
            .all()
        )

    @staticmethod
    def get_entry_by_id(db: Session, entry_id: int, user_id: str) -> Optional[CPDEntry]:
        return db.query(CPDEntry).filter(CPDEntry.id == entry_id, CPDEntry.user_id == user_id).first()

    @staticmethod
    def get_hour_totals(db: Session, user_id: str) -> tuple[float, float, int]:
        """(total hours, hours counting towards ICF CCE, entry count)"""
        total, count = (
            db.query(func.coalesce(func.sum(CPDEntry.hours), 0), func.count(CPDEntry.id))
            .filter(CPDEntry.user_id == user_id)
            .one()
        )
        cce = (
            db.query(func.coalesce(func.sum(CPDEntry.hours), 0))
            .filter(CPDEntry.user_id == user_id, CPDEntry.icf_cce_hours.isnot(False))
            .scalar()
        )
        return float(total or 0), float(cce or 0), int(count or 0)

    @staticmethod
    def create_entry(db: Session, user_id: str, **entry_data) -> CPDEntry:
        entry = CPDEntry(user_id=user_id, **entry_data)
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def update_entry(db: Session, entry: CPDEntry, **updates) -> CPDEntry:
        for key, value in updates.items():
            if hasattr(entry, key):
                setattr(entry, key, value)
        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def delete_entry(db: Session, entry: CPDEntry) -> None:
        db.delete(entry)
        db.commit()
