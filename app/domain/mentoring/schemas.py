"""Mentoring / supervision schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...utils.date_utils import to_naive_utc
from ...utils.sanitization import clean_text

SessionType = Literal["mentoring", "supervision"]
DurationUnit = Literal["hours", "minutes"]

MENTORING_ONLY_FIELDS = ("delivery_type",)
SUPERVISION_ONLY_FIELDS = ("supervision_type", "is_formal_supervision")


def duration_in_minutes(duration: float, unit: Optional[str]) -> int:
    """Stored duration is always whole minutes"""
    if unit == "hours":
        return round(duration * 60)
    return round(duration)


class MentoringFields(BaseModel):
    @field_validator("session_date", check_fields=False)
    @classmethod
    def validate_session_date(cls, v):
        return to_naive_utc(v)

    @field_validator("duration", check_fields=False)
    @classmethod
    def validate_duration(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Duration must be greater than 0")
        return v

    @field_validator(
        "provider_name",
        "credential_level",
        "delivery_type",
        "supervision_type",
        "focus_area",
        "session_notes",
        "uploaded_file_name",
        "uploaded_file_path",
        check_fields=False,
    )
    @classmethod
    def validate_text(cls, v):
        return clean_text(v)


class MentoringCreate(MentoringFields):
    session_type: SessionType
    session_date: datetime
    duration: float
    duration_unit: DurationUnit = "minutes"
    provider_name: Optional[str] = None
    credential_level: Optional[str] = None
    delivery_type: Optional[str] = None
    supervision_type: Optional[str] = None
    focus_area: Optional[str] = None
    session_notes: Optional[str] = None
    is_formal_supervision: Optional[bool] = None
    uploaded_file_name: Optional[str] = None
    uploaded_file_path: Optional[str] = None
    uploaded_file_size: Optional[int] = None


class MentoringUpdate(MentoringFields):
    session_type: Optional[SessionType] = None
    session_date: Optional[datetime] = None
    duration: Optional[float] = None
    duration_unit: DurationUnit = "minutes"
    provider_name: Optional[str] = None
    credential_level: Optional[str] = None
    delivery_type: Optional[str] = None
    supervision_type: Optional[str] = None
    focus_area: Optional[str] = None
    session_notes: Optional[str] = None
    is_formal_supervision: Optional[bool] = None
    uploaded_file_name: Optional[str] = None
    uploaded_file_path: Optional[str] = None
    uploaded_file_size: Optional[int] = None


class MentoringResponse(BaseModel):
    id: int
    session_type: str
    session_date: datetime
    duration: int
    provider_name: Optional[str] = None
    credential_level: Optional[str] = None
    delivery_type: Optional[str] = None
    supervision_type: Optional[str] = None
    focus_area: Optional[str] = None
    session_notes: Optional[str] = None
    is_formal_supervision: Optional[bool] = None
    uploaded_file_name: Optional[str] = None
    uploaded_file_path: Optional[str] = None
    uploaded_file_size: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
