"""Admin email schemas

Request bodies keep the camelCase names the dashboard sends.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ScheduleEmailRequest(BaseModel):
    subject: Optional[str] = None
    emailContent: Optional[str] = None
    scheduledFor: Optional[str] = None
    recipientType: str = "all"
    recipientUserIds: list[str] = []

    @field_validator("recipientType")
    @classmethod
    def validate_recipient_type(cls, v):
        if v not in ("all", "selected"):
            raise ValueError("recipientType must be 'all' or 'selected'")
        return v


class CustomReminderRequest(BaseModel):
    subject: Optional[str] = None
    emailContent: Optional[str] = None
    recipientType: str = "all"
    recipientUserIds: list[str] = []


class SendRemindersRequest(BaseModel):
    userIds: list[str] = []
    sendToAll: bool = False
    customSubject: Optional[str] = None
    customMessage: Optional[str] = None


class ScheduledEmailResponse(BaseModel):
    id: int
    created_by: str
    subject: str
    email_content: str
    recipient_type: str
    recipient_user_ids: Optional[list[str]] = None
    scheduled_for: datetime
    status: str
    sent_count: int = 0
    failed_count: int = 0
    error_details: Optional[Any] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
