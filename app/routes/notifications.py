import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..email_service import EmailSendError, send_calendly_booking_email, send_reminder_email
from ..models import Profile
from ..services.activity_service import get_user_activity_stats
from ..shared.notification_types import (
    CALENDLY_EVENTS,
    NOTIFICATION_TYPES,
    is_type_enabled,
    parse_notification_types,
)
from ..shared.validators import filter_notification_types
from ..utils.date_utils import parse_iso_datetime

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])
test_router = APIRouter(prefix="/test", tags=["Notifications"])

DEFAULT_EMAIL_SUBJECT = "ICF Log Reminder"
DEFAULT_EMAIL_BODY = "This is a reminder from ICF Log."


class PreferencesUpdate(BaseModel):
    notificationTypes: list[str] = []


class SendEmailRequest(BaseModel):
    notificationType: Optional[str] = None
    title: Optional[str] = None
    body: Optional[str] = None


class CalendlyTestRequest(BaseModel):
    clientName: Optional[str] = None
    eventDate: Optional[str] = None
    duration: Optional[int] = None


def is_test_email(title: Optional[str], body: Optional[str]) -> bool:
    return "Test" in (title or "") or "test" in (body or "")


def type_not_enabled(notification_type: str, enabled: list[str]) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "detail": f"Email notifications for '{notification_type}' are not enabled",
            "enabledTypes": enabled,
        },
    )


# ============================================================================
# PREFERENCES
# ============================================================================


@router.get("/preferences")
async def get_preferences(current_user: Profile = Depends(get_current_user)):
    return {
        "email_notification_types": parse_notification_types(current_user.email_notification_types),
        "available_types": NOTIFICATION_TYPES,
    }


@router.put("/preferences")
async def update_preferences(
    data: PreferencesUpdate,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    current_user.email_notification_types = filter_notification_types(data.notificationTypes)
    db.commit()
    db.refresh(current_user)
    logger.info(f"🔔 Email notification types updated for user {current_user.user_id}")
    return {
        "email_notification_types": parse_notification_types(current_user.email_notification_types),
        "available_types": NOTIFICATION_TYPES,
    }


# ============================================================================
# EMAIL
# ============================================================================


@router.post("/send-email")
async def send_notification_email(
    data: SendEmailRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not data.notificationType:
        raise HTTPException(status_code=400, detail="notificationType is required")
    if not current_user.email:
        raise HTTPException(status_code=400, detail="No email address found for your account")

    enabled = parse_notification_types(current_user.email_notification_types)
    if not is_test_email(data.title, data.body) and not is_type_enabled(enabled, data.notificationType):
        return type_not_enabled(data.notificationType, enabled)

    stats = get_user_activity_stats(db, current_user.user_id)
    try:
        result = await send_reminder_email(
            to=current_user.email,
            user_name=current_user.name,
            custom_subject=data.title or DEFAULT_EMAIL_SUBJECT,
            custom_message=data.body or DEFAULT_EMAIL_BODY,
            **stats,
        )
    except EmailSendError as e:
        raise HTTPException(status_code=500, detail=f"Failed to send email: {e}") from e

    return {"success": True, "id": result.get("id"), "sentTo": current_user.email}


@test_router.post("/calendly-email")
async def send_test_calendly_email(
    data: CalendlyTestRequest,
    current_user: Profile = Depends(get_current_user),
):
    if not current_user.email:
        raise HTTPException(status_code=400, detail="No email address found for your account")

    enabled = parse_notification_types(current_user.email_notification_types)
    if not is_type_enabled(enabled, CALENDLY_EVENTS):
        return type_not_enabled(CALENDLY_EVENTS, enabled)

    try:
        event_date = parse_iso_datetime(data.eventDate) if data.eventDate else None
    except ValueError as e:
        raise HTTPException(status_code=400, detail="Invalid eventDate") from e

    try:
        await send_calendly_booking_email(
            to=current_user.email,
            client_name=data.clientName or "Test Client",
            event_date=event_date or datetime.utcnow() + timedelta(days=1),
            duration=data.duration or 60,
            is_test=True,
        )
    except EmailSendError as e:
        raise HTTPException(status_code=500, detail=f"Failed to send email: {e}") from e

    return {
        "success": True,
        "message": "Test Calendly email sent",
        "sentTo": current_user.email,
    }
