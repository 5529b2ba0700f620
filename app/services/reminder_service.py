"""
Automated reminders, run daily by the worker or through the cron endpoint.

Four checks per coach, each gated by the coach's notification types:

- no session logged in the last 7 days
- a session logged in the last 2 hours without notes
- no CPD activity in the last 14 days
- CPD renewal date 90/75/50/25 days away (one day either side)
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ..config import APP_URL
from ..email_service import send_reminder_email
from ..email_templates import DEFAULT_USER_NAME
from ..models import CoachingSession, CPDEntry, Profile, PushSubscription
from ..shared.notification_types import (
    CPD_ACTIVITY_REMINDERS,
    CPD_DEADLINE_REMINDERS,
    LEGACY_CPD_DEADLINES,
    LEGACY_SESSION_REMINDERS,
    REFLECTION_REMINDERS,
    SESSION_LOGGING_REMINDERS,
    is_type_enabled,
    parse_notification_types,
)
from .notification_service import send_notification

logger = logging.getLogger(__name__)

SESSION_GAP_DAYS = 7
CPD_GAP_DAYS = 14
REFLECTION_WINDOW_HOURS = 2
REFLECTION_CANDIDATES = 5
DEADLINE_MILESTONES = (90, 75, 50, 25)
DEADLINE_TOLERANCE_DAYS = 1


def empty_results() -> dict:
    return {
        "sessionReminders": {"sent": 0, "failed": 0},
        "reflectionReminders": {"sent": 0, "failed": 0},
        "cpdActivityReminders": {"sent": 0, "failed": 0},
        "cpdDeadlineReminders": {"sent": 0, "failed": 0},
        "errors": [],
    }


def reminder_message_html(body: str, url: str) -> str:
    """Body placed into the standard reminder template, with a link to the relevant page"""
    return f'{body}<br><br><a href="{APP_URL}{url}">View in ICF Log</a>'


def days_until(target: datetime, now: datetime) -> int:
    return math.ceil((target - now).total_seconds() / 86400)


def deadline_milestone_due(days_left: int) -> bool:
    return any(abs(days_left - m) <= DEADLINE_TOLERANCE_DAYS for m in DEADLINE_MILESTONES)


def renewal_progress_percent(days_left: int) -> int:
    return round((1 - days_left / 365) * 100)


def needs_session_reminder(db: Session, user_id: str, now: datetime) -> bool:
    latest = (
        db.query(CoachingSession.date)
        .filter(CoachingSession.user_id == user_id)
        .order_by(CoachingSession.date.desc())
        .first()
    )
    return latest is None or latest[0] < now - timedelta(days=SESSION_GAP_DAYS)


def find_session_missing_notes(db: Session, user_id: str, now: datetime) -> Optional[CoachingSession]:
    recent = (
        db.query(CoachingSession)
        .filter(
            CoachingSession.user_id == user_id,
            CoachingSession.created_at >= now - timedelta(hours=REFLECTION_WINDOW_HOURS),
        )
        .order_by(CoachingSession.created_at.desc())
        .limit(REFLECTION_CANDIDATES)
        .all()
    )
    for session in recent:
        if not (session.notes or "").strip():
            return session
    return None


def needs_cpd_reminder(db: Session, user_id: str, now: datetime) -> bool:
    latest = (
        db.query(CPDEntry.activity_date)
        .filter(CPDEntry.user_id == user_id)
        .order_by(CPDEntry.activity_date.desc())
        .first()
    )
    return latest is None or latest[0] < now - timedelta(days=CPD_GAP_DAYS)


async def _deliver(
    db: Session,
    profile: Profile,
    counter: dict,
    notification_type: str,
    legacy_type: str,
    title: str,
    body: str,
    url: str,
) -> None:
    result = await send_notification(
        db,
        profile,
        notification_type,
        payload={"title": title, "body": body, "url": url},
        email_func=send_reminder_email,
        email_kwargs={
            "user_name": profile.name or DEFAULT_USER_NAME,
            "custom_subject": title,
            "custom_message": reminder_message_html(body, url),
        },
        legacy_type=legacy_type,
    )
    counter["sent"] += result["push_sent"] + int(result["email_sent"])
    counter["failed"] += result["push_failed"] + int(bool(result["email_error"]))


async def process_profile(db: Session, profile: Profile, results: dict, now: datetime) -> None:
    enabled = set(parse_notification_types(profile.email_notification_types))
    for subscription in (
        db.query(PushSubscription).filter(PushSubscription.user_id == profile.user_id).all()
    ):
        enabled.update(parse_notification_types(subscription.notification_types))
    enabled = list(enabled)

    if not enabled:
        return

    if is_type_enabled(enabled, SESSION_LOGGING_REMINDERS, LEGACY_SESSION_REMINDERS):
        if needs_session_reminder(db, profile.user_id, now):
            await _deliver(
                db,
                profile,
                results["sessionReminders"],
                SESSION_LOGGING_REMINDERS,
                LEGACY_SESSION_REMINDERS,
                "Session Logging Reminder",
                "You haven't logged a coaching session in 7 days. Don't forget to log your recent sessions!",
                "/dashboard/sessions/log",
            )

    if is_type_enabled(enabled, REFLECTION_REMINDERS, LEGACY_SESSION_REMINDERS):
        session = find_session_missing_notes(db, profile.user_id, now)
        if session:
            await _deliver(
                db,
                profile,
                results["reflectionReminders"],
                REFLECTION_REMINDERS,
                LEGACY_SESSION_REMINDERS,
                "Add Session Notes",
                "You logged a session but didn't add notes. Consider adding reflection notes while it's fresh in your mind!",
                f"/dashboard/sessions/edit/{session.id}",
            )

    if is_type_enabled(enabled, CPD_ACTIVITY_REMINDERS, LEGACY_CPD_DEADLINES):
        if needs_cpd_reminder(db, profile.user_id, now):
            await _deliver(
                db,
                profile,
                results["cpdActivityReminders"],
                CPD_ACTIVITY_REMINDERS,
                LEGACY_CPD_DEADLINES,
                "CPD Activity Reminder",
                "You haven't logged any CPD activities in 14 days. Keep your professional development on track!",
                "/dashboard/cpd/log",
            )

    if profile.cpd_renewal_date and is_type_enabled(
        enabled, CPD_DEADLINE_REMINDERS, LEGACY_CPD_DEADLINES
    ):
        days_left = days_until(profile.cpd_renewal_date, now)
        if deadline_milestone_due(days_left):
            percent = renewal_progress_percent(days_left)
            await _deliver(
                db,
                profile,
                results["cpdDeadlineReminders"],
                CPD_DEADLINE_REMINDERS,
                LEGACY_CPD_DEADLINES,
                "CPD Deadline Reminder",
                f"Your CPD renewal deadline is in {days_left} days ({percent}% of the way through "
                "your renewal period). Make sure you've logged all your required hours!",
                "/dashboard/cpd",
            )


async def check_and_send_reminders(db: Session, now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()
    results = empty_results()

    profiles = db.query(Profile).all()
    logger.info(f"🔔 Checking reminders for {len(profiles)} users")

    for profile in profiles:
        try:
            await process_profile(db, profile, results, now)
        except Exception as e:
            logger.error(f"❌ Reminder check failed for user {profile.user_id}: {e}")
            results["errors"].append(f"User {profile.user_id}: {str(e)}")

    logger.info(
        "✅ Reminder run finished: "
        + ", ".join(
            f"{name} {counts['sent']}/{counts['failed']}"
            for name, counts in results.items()
            if name != "errors"
        )
    )
    return results
