# =============================================================================
# tests/test_plan_limits.py - Free Tier Limit Tests
# =============================================================================
# Run with: pytest tests/test_plan_limits.py -v
# =============================================================================

from datetime import datetime

import pytest
from fastapi import HTTPException

from app.models import CoachingSession, CPDEntry, Profile
from app.plan_limits import (
    FREE_LIMIT,
    can_use_feature,
    ensure_can_add_entry,
    get_usage_progress,
    get_usage_stats,
    is_subscribed,
)


def usage(used: int, subscribed: bool = False) -> dict:
    return {"used": used, "limit": FREE_LIMIT, "remaining": max(0, FREE_LIMIT - used), "is_subscribed": subscribed}


class TestSubscriptionState:
    """Who counts as subscribed."""

    def test_active_status(self):
        assert is_subscribed(Profile(subscription_status="active", subscription_plan="free"))

    def test_paid_plan_without_active_status(self):
        assert is_subscribed(Profile(subscription_status="past_due", subscription_plan="pro_monthly"))

    def test_free_plan(self):
        assert not is_subscribed(Profile(subscription_status="inactive", subscription_plan="free"))
        assert not is_subscribed(Profile(subscription_status=None, subscription_plan=None))

    def test_premium_features_gated_for_free_users(self):
        free = Profile(subscription_status="inactive", subscription_plan="free")
        paid = Profile(subscription_status="active", subscription_plan="starter_monthly")
        assert not can_use_feature(free, "export_data")
        assert can_use_feature(paid, "export_data")
        assert can_use_feature(free, "sessions")


class TestUsage:
    """Entry counting and the dashboard progress bar."""

    def test_sessions_and_cpd_are_combined(self, db_session, coach):
        for day in range(1, 7):
            db_session.add(CoachingSession(user_id=coach.user_id, client_name="C", date=datetime(2024, 1, day), duration=60))
        for day in range(1, 5):
            db_session.add(CPDEntry(user_id=coach.user_id, title="Course", activity_date=datetime(2024, 2, day), hours=1))
        db_session.commit()

        stats = get_usage_stats(coach, db_session)
        assert stats["used"] == 10
        assert stats["remaining"] == 0
        assert stats["has_reached_limit"] is True

        with pytest.raises(HTTPException) as exc_info:
            ensure_can_add_entry(coach, db_session)
        assert exc_info.value.status_code == 403
        assert exc_info.value.headers == {"X-Upgrade-Required": "true"}

    def test_progress_colours(self):
        assert get_usage_progress(usage(2)) == {
            "percentage": 20,
            "color": "green",
            "message": "2 of 10 free entries used",
            "show_progress": True,
        }
        assert get_usage_progress(usage(6))["color"] == "yellow"
        assert get_usage_progress(usage(8))["color"] == "red"
        assert get_usage_progress(usage(14))["percentage"] == 100

    def test_progress_for_subscriber(self):
        progress = get_usage_progress(usage(40, subscribed=True))
        assert progress["message"] == "Unlimited entries with your subscription"
        assert progress["show_progress"] is False
