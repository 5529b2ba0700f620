"""Admin email router - scheduled emails and reminder campaigns"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ...auth import get_optional_user, has_cron_secret, is_admin, require_admin
from ...config import CRON_SECRET_KEY
from ...database import get_db
from ...models import Profile
from .schemas import (
    CustomReminderRequest,
    ScheduledEmailResponse,
    ScheduleEmailRequest,
    SendRemindersRequest,
)
from .service import AdminEmailService, process_due_scheduled_emails

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin Email"])


def get_admin_email_service(db: Session = Depends(get_db)) -> AdminEmailService:
    return AdminEmailService(db)


# ============================================================================
# SCHEDULED EMAILS
# ============================================================================


@router.post("/schedule-email")
async def schedule_email(
    body: ScheduleEmailRequest,
    admin: Profile = Depends(require_admin),
    service: AdminEmailService = Depends(get_admin_email_service),
):
    scheduled = service.schedule_email(body, admin)
    return {"success": True, "scheduledEmail": ScheduledEmailResponse.model_validate(scheduled)}


@router.get("/scheduled-emails", response_model=list[ScheduledEmailResponse])
async def list_scheduled_emails(
    admin: Profile = Depends(require_admin),
    service: AdminEmailService = Depends(get_admin_email_service),
):
    return service.list_scheduled_emails()


@router.delete("/scheduled-emails/{email_id}")
async def cancel_scheduled_email(
    email_id: int,
    admin: Profile = Depends(require_admin),
    service: AdminEmailService = Depends(get_admin_email_service),
):
    service.cancel_scheduled_email(email_id)
    return {"success": True}


@router.api_route("/process-scheduled-emails", methods=["GET", "POST"])
async def process_scheduled_emails(
    request: Request,
    user: Optional[Profile] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Runs from cron with the CRON_SECRET_KEY bearer token, or by an admin"""
    if not has_cron_secret(request, CRON_SECRET_KEY) and not is_admin(user):
        raise HTTPException(
            status_code=403, detail="Unauthorized. Admin access or valid cron secret required."
        )
    return await process_due_scheduled_emails(db)


# ============================================================================
# IMMEDIATE SENDS
# ============================================================================


@router.post("/send-custom-reminders")
async def send_custom_reminders(
    body: CustomReminderRequest,
    admin: Profile = Depends(require_admin),
    service: AdminEmailService = Depends(get_admin_email_service),
):
    return await service.send_custom_reminders(body, admin)


@router.post("/send-reminders")
async def send_reminders(
    body: SendRemindersRequest,
    admin: Profile = Depends(require_admin),
    service: AdminEmailService = Depends(get_admin_email_service),
):
    return await service.send_reminders(body)
