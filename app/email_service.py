"""
Email Service using Resend
Templated emails are MJML compiled to HTML; admin content arrives as ready HTML
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import RESEND_API_KEY, RESEND_FROM_EMAIL
from .email_templates import calendly_booking_template, reminder_email_template

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY

DEFAULT_REMINDER_SUBJECT = "Reminder: Keep Your ICF Log Updated"

# Pause between sends in bulk loops to stay under the provider's rate limit
BULK_SEND_DELAY_SECONDS = 0.1


class EmailSendError(Exception):
    """Raised when an email could not be handed to the provider"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailSendError(f"Failed to compile MJML template: {str(e)}") from e

    if result.get("errors"):
        logger.warning(f"MJML compilation warnings: {result['errors']}")
    return result.get("html", "")


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    html: Optional[str] = None,
    mjml_content: Optional[str] = None,
    text: Optional[str] = None,
    headers: Optional[dict] = None,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend.

    Args:
        to: Recipient email(s)
        subject: Subject line
        html: Ready HTML body (used as is)
        mjml_content: MJML template, compiled when html is not given
        text: Optional plain text alternative
        headers: Extra email headers
        from_address: Overrides RESEND_FROM_EMAIL

    Raises:
        EmailSendError: when Resend is not configured or rejects the message
    """
    if not resend.api_key:
        logger.error("❌ RESEND_API_KEY is not configured")
        raise EmailSendError("RESEND_API_KEY is not configured")

    if html is None:
        if mjml_content is None:
            raise EmailSendError("Email has no content")
        html = compile_mjml_to_html(mjml_content)

    recipients = [to] if isinstance(to, str) else to
    params = {
        "from": from_address or RESEND_FROM_EMAIL,
        "to": recipients,
        "subject": subject,
        "html": html,
    }
    if text:
        params["text"] = text
    if headers:
        params["headers"] = headers

    try:
        response = resend.Emails.send(params)
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise EmailSendError(str(e)) from e

    logger.info(f"📧 Email sent to {recipients}: {subject}")
    return {"success": True, "id": response.get("id") if isinstance(response, dict) else None}


async def send_reminder_email(
    to: str,
    user_name: Optional[str] = None,
    last_activity_date: Optional[datetime] = None,
    session_count: Optional[int] = None,
    cpd_hours: Optional[float] = None,
    custom_subject: Optional[str] = None,
    custom_message: Optional[str] = None,
) -> dict:
    mjml_content = reminder_email_template(
        user_name=user_name,
        last_activity_date=last_activity_date,
        session_count=session_count,
        cpd_hours=cpd_hours,
        custom_message=custom_message,
    )
    return await send_email(
        to=to,
        subject=custom_subject or DEFAULT_REMINDER_SUBJECT,
        mjml_content=mjml_content,
    )


async def send_bulk_reminders(recipients: list[dict]) -> dict:
    """
    Send the standard reminder to each recipient, one at a time.

    Each recipient dict carries email plus the keyword arguments of
    send_reminder_email. Failures are collected, never raised.
    """
    results = {"sent": 0, "failed": 0, "errors": []}

    for recipient in recipients:
        email = recipient["email"]
        try:
            await send_reminder_email(
                to=email,
                user_name=recipient.get("user_name"),
                last_activity_date=recipient.get("last_activity_date"),
                session_count=recipient.get("session_count"),
                cpd_hours=recipient.get("cpd_hours"),
                custom_subject=recipient.get("custom_subject"),
                custom_message=recipient.get("custom_message"),
            )
            results["sent"] += 1
        except EmailSendError as e:
            results["failed"] += 1
            results["errors"].append({"email": email, "error": str(e)})

        await asyncio.sleep(BULK_SEND_DELAY_SECONDS)

    logger.info(f"📧 Bulk reminders finished: {results['sent']} sent, {results['failed']} failed")
    return results


async def send_calendly_booking_email(
    to: str, client_name: str, event_date: datetime, duration: int, is_test: bool = False
) -> dict:
    subject = "Test: New Calendly Booking - ICF Log" if is_test else "New Calendly Booking - ICF Log"
    return await send_email(
        to=to,
        subject=subject,
        mjml_content=calendly_booking_template(client_name, event_date, duration, is_test),
    )
