"""
Web Push delivery with VAPID.
Subscriptions rejected by the push service as gone (404/410) are deleted.
"""

import asyncio
import json
import logging
from typing import Iterable

from pywebpush import WebPushException, webpush
from sqlalchemy.orm import Session

from ..config import VAPID_EMAIL, VAPID_PRIVATE_KEY, VAPID_PUBLIC_KEY
from ..models import PushSubscription
from ..shared.notification_types import parse_notification_types

logger = logging.getLogger(__name__)

EXPIRED_STATUS_CODES = (404, 410)


class PushSendError(Exception):
    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code


def vapid_configured() -> bool:
    return bool(VAPID_PUBLIC_KEY and VAPID_PRIVATE_KEY and VAPID_EMAIL)


def subscriptions_for_type(
    subscriptions: Iterable[PushSubscription], *type_names: str
) -> list[PushSubscription]:
    """Subscriptions that opted in to any of type_names"""
    matching = []
    for subscription in subscriptions:
        enabled = parse_notification_types(subscription.notification_types)
        if any(name and name in enabled for name in type_names):
            matching.append(subscription)
    return matching


async def send_push(subscription: PushSubscription, payload: dict) -> None:
    """
    Deliver one payload.

    Raises:
        PushSendError: on any delivery failure
    """
    try:
        subscription_info = json.loads(subscription.subscription)
    except ValueError as e:
        raise PushSendError("Stored subscription is not valid JSON") from e

    try:
        await asyncio.to_thread(
            webpush,
            subscription_info=subscription_info,
            data=json.dumps(payload),
            vapid_private_key=VAPID_PRIVATE_KEY,
            # pywebpush adds aud/exp to the claims dict, so build a new one per call
            vapid_claims={"sub": f"mailto:{VAPID_EMAIL}"},
        )
    except WebPushException as e:
        status_code = e.response.status_code if e.response is not None else None
        raise PushSendError(str(e), status_code) from e


async def send_to_subscriptions(
    db: Session, subscriptions: Iterable[PushSubscription], payload: dict
) -> dict:
    """Send payload to each subscription; returns {sent, failed}"""
    result = {"sent": 0, "failed": 0}
    expired = []

    for subscription in subscriptions:
        try:
            await send_push(subscription, payload)
            result["sent"] += 1
        except PushSendError as e:
            result["failed"] += 1
            if e.status_code in EXPIRED_STATUS_CODES:
                expired.append(subscription)
            logger.warning(f"⚠️ Push to subscription {subscription.id} failed: {e}")

    for subscription in expired:
        logger.info(f"🧹 Removing expired push subscription {subscription.id}")
        db.delete(subscription)
    if expired:
        db.commit()

    return result
