"""
Calendly Webhook Routes
Bookings made through a coach's Calendly page become sessions in their log.
"""

import json
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..config import CALENDLY_SIGNING_KEY
from ..database import get_db
from ..domain.sessions.repository import SessionRepository
from ..email_service import send_calendly_booking_email
from ..models import CoachingSession, Profile
from ..rate_limiter import create_rate_limiter
from ..services.calendly_service import event_duration_minutes, extract_calendly_username, name_from_email
from ..services.notification_service import send_notification
from ..shared.notification_types import CALENDLY_EVENTS
from ..utils.date_utils import parse_iso_datetime
from ..webhook_security import verify_calendly_webhook

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks/calendly", tags=["Webhooks"])

rate_limit_webhook = create_rate_limiter(
    limit=100,
    window_seconds=60,
    key_prefix="webhook_calendly",
    use_ip=False,
)

CANCELED_SUFFIX = " [CANCELED via Calendly]"


def find_event_owner(db: Session, event_uri: str) -> Optional[Profile]:
    """The coach whose calendly_url contains the username (or event path) of the event URI"""
    username = extract_calendly_username(event_uri)
    if not username:
        return None

    event_base = event_uri.rsplit("/", 1)[0]
    for profile in db.query(Profile).filter(Profile.calendly_url.isnot(None)).all():
        if username in profile.calendly_url or event_base in profile.calendly_url:
            return profile
    return None


@router.get("")
async def webhook_status():
    return {
        "message": "Calendly webhook endpoint is active",
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.post("")
async def handle_calendly_webhook(
    request: Request, db: Session = Depends(get_db), _: None = Depends(rate_limit_webhook)
):
    """
    Handle Calendly webhook events: invitee.created, invitee.canceled.

    When CALENDLY_SIGNING_KEY is set and the request carries a
    Calendly-Webhook-Signature header, the header must match the body.
    """
    body = await verify_calendly_webhook(request, CALENDLY_SIGNING_KEY)

    try:
        event = json.loads(body.decode())
        event_type = event.get("event")
        payload = event.get("payload") or {}
        logger.info(f"📥 Received Calendly webhook: {event_type}")

        if event_type == "invitee.created":
            await handle_invitee_created(payload, db)
        elif event_type == "invitee.canceled":
            handle_invitee_canceled(payload, db)
        else:
            logger.debug(f"Unhandled event type: {event_type}")
    except Exception as e:
        logger.exception(f"❌ Calendly webhook processing error: {e}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal server error") from e

    return {"received": True}


async def handle_invitee_created(payload: dict, db: Session) -> Optional[CoachingSession]:
    email = payload.get("email") or ""
    name = payload.get("name") or name_from_email(email)
    scheduled_event = payload.get("scheduled_event") or {}
    start = parse_iso_datetime(payload.get("event_start_time") or scheduled_event.get("start_time"))
    end = parse_iso_datetime(payload.get("event_end_time") or scheduled_event.get("end_time"))
    event_uri = payload.get("event") or scheduled_event.get("uri") or ""
    invitee_uri = payload.get("uri") or ""

    if not start:
        logger.error("❌ Calendly invitee.created payload has no start time")
        return None

    if invitee_uri:
        existing = SessionRepository.get_by_invitee_uri(db, invitee_uri)
        if existing:
            logger.info(f"Calendly invitee {invitee_uri} already logged as session {existing.id}")
            return existing

    owner = find_event_owner(db, event_uri)
    if not owner:
        logger.warning(f"⚠️ No coach matches Calendly event {event_uri}; booking ignored")
        return None

    session = SessionRepository.create_session(
        db,
        owner.user_id,
        client_name=name or "Calendly Booking",
        date=start,
        finish_date=end,
        duration=event_duration_minutes(start, end),
        types=["one-on-one"],
        payment_type="scheduled",
        notes=f"Scheduled via Calendly. Event URI: {event_uri}",
        calendly_event_uri=event_uri,
        calendly_invitee_uri=invitee_uri or None,
        calendly_booking_id=invitee_uri.rstrip("/").split("/")[-1] if invitee_uri else None,
    )
    logger.info(f"✅ Calendly booking saved as session {session.id} for user {owner.user_id}")

    await send_notification(
        db,
        owner,
        CALENDLY_EVENTS,
        payload={
            "title": "New Calendly Booking",
            "body": f"{session.client_name} booked a session on {start:%d/%m/%Y %H:%M}",
            "url": "/dashboard/calendar",
        },
        email_func=send_calendly_booking_email,
        email_kwargs={
            "client_name": session.client_name,
            "event_date": start,
            "duration": session.duration,
        },
    )
    return session


def handle_invitee_canceled(payload: dict, db: Session) -> Optional[CoachingSession]:
    invitee_uri = payload.get("uri")
    if not invitee_uri:
        return None

    session = SessionRepository.get_by_invitee_uri(db, invitee_uri)
    if not session:
        logger.info(f"No session found for canceled invitee {invitee_uri}")
        return None

    session.notes = (session.notes or "") + CANCELED_SUFFIX
    db.commit()
    logger.info(f"🛑 Session {session.id} marked canceled via Calendly")
    return session
