"""Notification type names shared by email preferences and push subscriptions"""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

CALENDLY_EVENTS = "Calendly events"
SESSION_LOGGING_REMINDERS = "Session logging reminders (7 days)"
REFLECTION_REMINDERS = "Post-session reflection reminders"
CPD_ACTIVITY_REMINDERS = "CPD activity reminders (14 days)"
CPD_DEADLINE_REMINDERS = "CPD deadline reminders (renewal date)"

# Older clients stored these coarser names
LEGACY_SESSION_REMINDERS = "Session reminders"
LEGACY_CPD_DEADLINES = "CPD deadlines"

NOTIFICATION_TYPES = [
    CALENDLY_EVENTS,
    SESSION_LOGGING_REMINDERS,
    REFLECTION_REMINDERS,
    CPD_ACTIVITY_REMINDERS,
    CPD_DEADLINE_REMINDERS,
]
LEGACY_NOTIFICATION_TYPES = [LEGACY_SESSION_REMINDERS, LEGACY_CPD_DEADLINES]
ALL_NOTIFICATION_TYPES = NOTIFICATION_TYPES + LEGACY_NOTIFICATION_TYPES


def parse_notification_types(value: Any) -> list[str]:
    """
    Normalise a stored notification type list.

    Rows written by older clients hold a JSON string instead of a list;
    anything unreadable counts as no types.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value]
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            logger.warning(f"⚠️ Unreadable notification types value: {value[:50]}")
            return []
        return [str(v) for v in parsed] if isinstance(parsed, list) else []
    return []


def is_type_enabled(enabled: list[str], canonical: str, legacy: str = "") -> bool:
    """A reminder is on when either its current name or its legacy alias is selected"""
    return canonical in enabled or bool(legacy and legacy in enabled)
