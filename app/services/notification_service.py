"""
Unified Notification Service
Sends one event to a coach over web push and email, honouring the
notification types selected for each channel.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models import Profile, PushSubscription
from ..shared.notification_types import is_type_enabled, parse_notification_types
from . import push_service

logger = logging.getLogger(__name__)


async def send_notification(
    db: Session,
    profile: Profile,
    notification_type: str,
    payload: dict,
    email_func=None,
    email_kwargs: Optional[dict] = None,
    legacy_type: str = "",
) -> dict:
    """
    Notify one user on every channel that has notification_type enabled.

    Args:
        db: Database session
        profile: Recipient profile
        notification_type: Current notification type name
        payload: Push payload {title, body, url}
        email_func: Coroutine sending the email; called with to=profile.email
        email_kwargs: Extra kwargs for email_func
        legacy_type: Older alias of notification_type that also enables it

    Returns:
        Dict with push_sent, push_failed, email_sent and email_error
    """
    result = {"push_sent": 0, "push_failed": 0, "email_sent": False, "email_error": None}

    # Push
    if push_service.vapid_configured():
        subscriptions = (
            db.query(PushSubscription).filter(PushSubscription.user_id == profile.user_id).all()
        )
        targets = push_service.subscriptions_for_type(subscriptions, notification_type, legacy_type)
        if targets:
            push_result = await push_service.send_to_subscriptions(db, targets, payload)
            result["push_sent"] = push_result["sent"]
            result["push_failed"] = push_result["failed"]
            logger.info(
                f"🔔 {notification_type} push to {profile.user_id}: "
                f"{push_result['sent']} sent, {push_result['failed']} failed"
            )

    # Email
    email_types = parse_notification_types(profile.email_notification_types)
    if email_func and profile.email and is_type_enabled(email_types, notification_type, legacy_type):
        try:
            await email_func(to=profile.email, **(email_kwargs or {}))
            result["email_sent"] = True
            logger.info(f"✅ {notification_type} email sent to {profile.email}")
        except Exception as e:
            result["email_error"] = str(e)
            logger.error(f"❌ Failed to send {notification_type} email to {profile.email}: {e}")

    return result
