"""Coaching session schemas"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from ...utils.date_utils import to_naive_utc
from ...utils.sanitization import clean_text

PAYMENT_TYPES = {"paid", "proBono", "pro-bono", "scheduled"}
SESSION_TEXT_FIELDS = (
    "focus_area",
    "key_outcomes",
    "client_progress",
    "notes",
    "additional_notes",
)


class SessionFields(BaseModel):
    """Validators shared by create and update payloads"""

    @field_validator("client_name", check_fields=False)
    @classmethod
    def validate_client_name(cls, v):
        return clean_text(v, max_length=255)

    @field_validator("date", "finish_date", check_fields=False)
    @classmethod
    def validate_dates(cls, v):
        return to_naive_utc(v)

    @field_validator("duration", check_fields=False)
    @classmethod
    def validate_duration(cls, v):
        if v is not None and v < 0:
            raise ValueError("Duration cannot be negative")
        return v

    @field_validator("number_in_group", check_fields=False)
    @classmethod
    def validate_number_in_group(cls, v):
        if v is not None and v < 1:
            raise ValueError("Number in group must be at least 1")
        return v

    @field_validator("payment_type", check_fields=False)
    @classmethod
    def validate_payment_type(cls, v):
        if v in (None, ""):
            return None
        if v not in PAYMENT_TYPES:
            raise ValueError(f"Payment type must be one of: {', '.join(sorted(PAYMENT_TYPES))}")
        return v

    @field_validator(*SESSION_TEXT_FIELDS, check_fields=False)
    @classmethod
    def validate_text(cls, v):
        return clean_text(v)

    @field_validator("types", "coaching_tools", "icf_competencies", check_fields=False)
    @classmethod
    def validate_lists(cls, v):
        if v is None:
            return v
        return [item.strip() for item in v if item and item.strip()]


class SessionCreate(SessionFields):
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    date: datetime
    finish_date: Optional[datetime] = None
    duration: int = 0
    types: list[str] = []
    number_in_group: Optional[int] = None
    payment_type: Optional[str] = None
    # Localized strings such as "1.234,50" are parsed with the profile's country
    payment_amount: Optional[Union[float, str]] = None
    focus_area: Optional[str] = None
    key_outcomes: Optional[str] = None
    client_progress: Optional[str] = None
    coaching_tools: list[str] = []
    icf_competencies: list[str] = []
    notes: Optional[str] = None
    additional_notes: Optional[str] = None


class SessionUpdate(SessionFields):
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    date: Optional[datetime] = None
    finish_date: Optional[datetime] = None
    duration: Optional[int] = None
    types: Optional[list[str]] = None
    number_in_group: Optional[int] = None
    payment_type: Optional[str] = None
    payment_amount: Optional[Union[float, str]] = None
    focus_area: Optional[str] = None
    key_outcomes: Optional[str] = None
    client_progress: Optional[str] = None
    coaching_tools: Optional[list[str]] = None
    icf_competencies: Optional[list[str]] = None
    notes: Optional[str] = None
    additional_notes: Optional[str] = None


class SessionResponse(BaseModel):
    id: int
    client_id: Optional[int] = None
    client_name: str
    date: datetime
    finish_date: Optional[datetime] = None
    duration: int
    types: Optional[list[str]] = None
    number_in_group: Optional[int] = None
    payment_type: Optional[str] = None
    payment_amount: Optional[float] = None
    focus_area: Optional[str] = None
    key_outcomes: Optional[str] = None
    client_progress: Optional[str] = None
    coaching_tools: Optional[list[str]] = None
    icf_competencies: Optional[list[str]] = None
    notes: Optional[str] = None
    additional_notes: Optional[str] = None
    calendly_event_uri: Optional[str] = None
    calendly_invitee_uri: Optional[str] = None
    calendly_booking_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
