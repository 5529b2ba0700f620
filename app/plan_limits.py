"""
Free tier entry limit and subscription feature gates.

Free users may log FREE_LIMIT entries in total (coaching sessions plus CPD
activities). Any active subscription, or any plan other than "free",
removes the limit.
"""

from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from .models import CoachingSession, CPDEntry, Profile

FREE_LIMIT = 10
LIMIT_REACHED_MESSAGE = (
    f"You've reached your free limit of {FREE_LIMIT} entries. Please upgrade to continue."
)

PREMIUM_FEATURES = {"unlimited_entries", "advanced_reports", "export_data", "custom_fields"}


def is_subscribed(profile: Profile) -> bool:
    return profile.subscription_status == "active" or (
        (profile.subscription_plan or "free") != "free"
    )


def count_entries(db: Session, user_id: str) -> int:
    sessions = db.query(CoachingSession).filter(CoachingSession.user_id == user_id).count()
    cpd = db.query(CPDEntry).filter(CPDEntry.user_id == user_id).count()
    return sessions + cpd


def get_usage_stats(profile: Profile, db: Session) -> dict:
    subscribed = is_subscribed(profile)
    used = count_entries(db, profile.user_id)
    return {
        "used": used,
        "limit": FREE_LIMIT,
        "remaining": max(0, FREE_LIMIT - used),
        "is_subscribed": subscribed,
        "has_reached_limit": not subscribed and used >= FREE_LIMIT,
        "subscription_plan": profile.subscription_plan or "free",
        "subscription_status": profile.subscription_status,
    }


def get_usage_progress(usage: dict) -> dict:
    """Progress bar model for the dashboard usage widget"""
    if usage["is_subscribed"]:
        return {
            "percentage": 0,
            "color": "green",
            "message": "Unlimited entries with your subscription",
            "show_progress": False,
        }

    percentage = min(100, round(usage["used"] / usage["limit"] * 100))
    remaining = usage["remaining"]

    if percentage >= 80:
        color = "red"
    elif percentage >= 60:
        color = "yellow"
    else:
        color = "green"

    if percentage >= 60:
        message = f"{remaining} free entries remaining"
    else:
        message = f"{usage['used']} of {usage['limit']} free entries used"

    return {"percentage": percentage, "color": color, "message": message, "show_progress": True}


def can_add_entry(profile: Profile, db: Session) -> tuple[bool, Optional[str]]:
    """Returns (can_add, error_message)"""
    if is_subscribed(profile):
        return True, None
    if count_entries(db, profile.user_id) >= FREE_LIMIT:
        return False, LIMIT_REACHED_MESSAGE
    return True, None


def ensure_can_add_entry(profile: Profile, db: Session) -> None:
    allowed, message = can_add_entry(profile, db)
    if not allowed:
        raise HTTPException(
            status_code=403, detail=message, headers={"X-Upgrade-Required": "true"}
        )


def can_use_feature(profile: Profile, feature: str) -> bool:
    if feature not in PREMIUM_FEATURES:
        return True
    return is_subscribed(profile)


def get_feature_access(profile: Profile) -> dict[str, bool]:
    """Which premium features the profile can use, keyed by feature name"""
    return {feature: can_use_feature(profile, feature) for feature in sorted(PREMIUM_FEATURES)}
