"""Admin email service - scheduling, processing and sending announcement emails"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ... import email_service
from ...models import Profile, ScheduledEmail
from ...services.activity_service import get_user_activity_stats
from ...utils.date_utils import parse_iso_datetime
from ...utils.email_content import convert_text_to_html, html_to_plain_text
from .repository import EmailRepository
from .schemas import CustomReminderRequest, ScheduleEmailRequest, SendRemindersRequest

logger = logging.getLogger(__name__)


async def send_content_to_profiles(
    db: Session,
    profiles: list[Profile],
    subject: str,
    content: str,
    ref_prefix: Optional[str] = None,
) -> dict:
    """
    Send admin-written content to each profile, personalised with their stats.

    Sends are sequential with a short pause between them. Failures are
    collected as "{email}: {message}".
    """
    results = {"sent": 0, "failed": 0, "errors": []}

    for profile in profiles:
        try:
            stats = get_user_activity_stats(db, profile.user_id)
            html = convert_text_to_html(
                content,
                user_name=profile.name,
                session_count=stats["session_count"],
                cpd_hours=stats["cpd_hours"],
                last_activity_date=stats["last_activity_date"],
            )
            headers = None
            if ref_prefix:
                headers = {"X-Entity-Ref-ID": f"{ref_prefix}-{int(time.time() * 1000)}"}

            await email_service.send_email(
                to=profile.email,
                subject=subject,
                html=html,
                text=html_to_plain_text(html),
                headers=headers,
            )
            results["sent"] += 1
        except Exception as e:
            logger.error(f"❌ Failed to send '{subject}' to {profile.email}: {e}")
            results["failed"] += 1
            results["errors"].append(f"{profile.email}: {e}")

        await asyncio.sleep(email_service.BULK_SEND_DELAY_SECONDS)

    return results


async def process_scheduled_email(db: Session, scheduled: ScheduledEmail) -> dict:
    repo = EmailRepository()
    user_ids = None
    if scheduled.recipient_type == "selected":
        user_ids = scheduled.recipient_user_ids or []
    recipients = repo.get_recipients(db, user_ids)

    results = await send_content_to_profiles(
        db,
        recipients,
        scheduled.subject,
        scheduled.email_content,
        ref_prefix=f"scheduled-{scheduled.id}",
    )
    repo.mark_result(
        db,
        scheduled,
        status="sent" if results["failed"] == 0 else "failed",
        sent_count=results["sent"],
        failed_count=results["failed"],
        error_details={"errors": results["errors"]} if results["errors"] else None,
    )
    return results


async def process_due_scheduled_emails(db: Session, now: Optional[datetime] = None) -> dict:
    """Send every pending scheduled email whose time has come"""
    now = now or datetime.utcnow()
    repo = EmailRepository()
    due = repo.get_due_emails(db, now)

    if not due:
        return {"success": True, "processed": 0, "message": "No scheduled emails to process"}

    logger.info(f"📬 Processing {len(due)} scheduled email(s)")
    processed = sent = failed = 0
    for scheduled in due:
        try:
            results = await process_scheduled_email(db, scheduled)
            processed += 1
            sent += results["sent"]
            failed += results["failed"]
        except Exception as e:
            logger.error(f"❌ Scheduled email {scheduled.id} failed: {e}")
            db.rollback()
            repo.mark_result(db, scheduled, status="failed", error_details={"error": str(e)})

    return {"success": True, "processed": processed, "sent": sent, "failed": failed}


class AdminEmailService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = EmailRepository()

    def schedule_email(self, body: ScheduleEmailRequest, admin: Profile) -> ScheduledEmail:
        subject = (body.subject or "").strip()
        content = (body.emailContent or "").strip()
        if not subject or not content or not body.scheduledFor:
            raise HTTPException(
                status_code=400, detail="Subject, email content, and scheduled time are required"
            )

        try:
            scheduled_for = parse_iso_datetime(body.scheduledFor)
        except ValueError as e:
            raise HTTPException(status_code=400, detail="Invalid scheduled time") from e
        if scheduled_for <= datetime.utcnow():
            raise HTTPException(status_code=400, detail="Scheduled time must be in the future")

        scheduled = self.repo.create_scheduled_email(
            self.db,
            created_by=admin.user_id,
            subject=subject,
            email_content=content,
            recipient_type=body.recipientType,
            recipient_user_ids=body.recipientUserIds if body.recipientType == "selected" else None,
            scheduled_for=scheduled_for,
            status="pending",
        )
        logger.info(f"🗓️ Email {scheduled.id} scheduled for {scheduled_for} by {admin.user_id}")
        return scheduled

    def list_scheduled_emails(self) -> list[ScheduledEmail]:
        return self.repo.get_scheduled_emails(self.db)

    def cancel_scheduled_email(self, email_id: int) -> None:
        scheduled = self.repo.get_scheduled_email(self.db, email_id)
        if not scheduled:
            raise HTTPException(status_code=404, detail="Scheduled email not found")
        if scheduled.status != "pending":
            raise HTTPException(status_code=400, detail="Only pending emails can be cancelled")
        self.db.delete(scheduled)
        self.db.commit()
        logger.info(f"🗑️ Scheduled email {email_id} cancelled")

    async def send_custom_reminders(self, body: CustomReminderRequest, admin: Profile) -> dict:
        subject = (body.subject or "").strip()
        content = (body.emailContent or "").strip()
        if not subject or not content:
            raise HTTPException(status_code=400, detail="Subject and email content are required")

        if body.recipientType == "all":
            profiles = self.repo.get_recipients(self.db)
        elif body.recipientUserIds:
            profiles = self.repo.get_recipients(self.db, body.recipientUserIds)
        else:
            raise HTTPException(status_code=400, detail="No users specified")

        profiles = [p for p in profiles if "@" in (p.email or "")]
        if not profiles:
            raise HTTPException(status_code=400, detail="No valid email addresses found")

        results = await send_content_to_profiles(self.db, profiles, subject, content)

        self.repo.create_scheduled_email(
            self.db,
            created_by=admin.user_id,
            subject=subject,
            email_content=content,
            recipient_type="all" if body.recipientType == "all" else "selected",
            recipient_user_ids=None if body.recipientType == "all" else body.recipientUserIds,
            scheduled_for=datetime.utcnow(),
            status="sent" if results["failed"] == 0 else "failed",
            sent_count=results["sent"],
            failed_count=results["failed"],
            error_details={"errors": results["errors"]} if results["errors"] else None,
        )
        logger.info(
            f"📧 Custom reminder by {admin.user_id}: {results['sent']} sent, {results['failed']} failed"
        )
        return {"success": True, "total": len(profiles), **results}

    async def send_reminders(self, body: SendRemindersRequest) -> dict:
        if body.sendToAll:
            profiles = self.repo.get_recipients(self.db)
        elif body.userIds:
            profiles = self.repo.get_recipients(self.db, body.userIds)
        else:
            raise HTTPException(status_code=400, detail="Provide userIds or set sendToAll")

        recipients = []
        for profile in profiles:
            stats = get_user_activity_stats(self.db, profile.user_id)
            recipients.append(
                {
                    "email": profile.email,
                    "user_name": profile.name,
                    "custom_subject": body.customSubject,
                    "custom_message": body.customMessage,
                    **stats,
                }
            )

        results = await email_service.send_bulk_reminders(recipients)
        return {"success": True, "total": len(recipients), **results}
