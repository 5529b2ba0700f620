# =============================================================================
# tests/test_reminders.py - Automated Reminder Tests
# =============================================================================
# The daily reminder pass: inactivity checks, missing reflection notes and
# CPD renewal milestones, each delivered only on channels the coach enabled.
#
# Run with: pytest tests/test_reminders.py -v
# =============================================================================

import asyncio
import json
import os
from datetime import datetime, timedelta

from app.models import CoachingSession, CPDEntry, PushSubscription
from app.services.reminder_service import (
    check_and_send_reminders,
    days_until,
    deadline_milestone_due,
    renewal_progress_percent,
)
from app.shared.notification_types import (
    CPD_ACTIVITY_REMINDERS,
    CPD_DEADLINE_REMINDERS,
    LEGACY_SESSION_REMINDERS,
    REFLECTION_REMINDERS,
    SESSION_LOGGING_REMINDERS,
    is_type_enabled,
    parse_notification_types,
)

from .conftest import create_profile

NOW = datetime(2024, 6, 15, 9, 0)


class TestMilestones:
    """Tests for the renewal date arithmetic."""

    def test_days_until_rounds_up(self):
        assert days_until(NOW + timedelta(days=89, hours=1), NOW) == 90

    def test_milestones_with_one_day_tolerance(self):
        for days in (89, 90, 91, 74, 50, 26):
            assert deadline_milestone_due(days) is True
        for days in (88, 60, 30, 10):
            assert deadline_milestone_due(days) is False

    def test_progress_percent(self):
        assert renewal_progress_percent(90) == 75
        assert renewal_progress_percent(365) == 0


class TestNotificationTypes:
    """Stored type lists and legacy aliases."""

    def test_parse_list_and_json_string(self):
        assert parse_notification_types(["Calendly events"]) == ["Calendly events"]
        assert parse_notification_types('["Calendly events"]') == ["Calendly events"]
        assert parse_notification_types("not json") == []
        assert parse_notification_types(None) == []

    def test_legacy_alias_enables_type(self):
        assert is_type_enabled([LEGACY_SESSION_REMINDERS], SESSION_LOGGING_REMINDERS, LEGACY_SESSION_REMINDERS)
        assert not is_type_enabled([], SESSION_LOGGING_REMINDERS, LEGACY_SESSION_REMINDERS)


class TestReminderRun:
    """check_and_send_reminders against the database."""

    def test_coach_without_types_gets_nothing(self, db_session, coach, mock_resend):
        results = asyncio.run(check_and_send_reminders(db_session, now=NOW))
        assert results["sessionReminders"] == {"sent": 0, "failed": 0}
        assert mock_resend.call_count == 0

    def test_session_gap_email(self, db_session, mock_resend):
        create_profile(db_session, "r-1", "r1@example.com", email_notification_types=None)
        coach = create_profile(db_session, "r-2", "r2@example.com")
        coach.email_notification_types = [SESSION_LOGGING_REMINDERS]
        db_session.add(
            CoachingSession(user_id=coach.user_id, client_name="C", date=NOW - timedelta(days=8), duration=60)
        )
        db_session.commit()

        results = asyncio.run(check_and_send_reminders(db_session, now=NOW))

        assert results["sessionReminders"] == {"sent": 1, "failed": 0}
        params = mock_resend.call_args.args[0]
        assert params["to"] == ["r2@example.com"]
        assert params["subject"] == "Session Logging Reminder"
        assert "/dashboard/sessions/log" in params["html"]
        # Unnamed coaches get the default greeting inside the compiled reminder template
        assert params["html"].startswith("<html>")
        assert "Hi Valued Coach," in params["html"]
        assert "Update Your Log Now" in params["html"]

    def test_recent_session_means_no_reminder(self, db_session, coach, mock_resend):
        coach.email_notification_types = [SESSION_LOGGING_REMINDERS]
        db_session.add(
            CoachingSession(user_id=coach.user_id, client_name="C", date=NOW - timedelta(days=2), duration=60)
        )
        db_session.commit()

        results = asyncio.run(check_and_send_reminders(db_session, now=NOW))
        assert results["sessionReminders"]["sent"] == 0

    def test_reflection_reminder_for_session_without_notes(self, db_session, coach, mock_resend):
        coach.email_notification_types = [REFLECTION_REMINDERS]
        session = CoachingSession(
            user_id=coach.user_id,
            client_name="C",
            date=NOW,
            duration=60,
            notes="   ",
            created_at=NOW - timedelta(minutes=30),
        )
        db_session.add(session)
        db_session.commit()

        results = asyncio.run(check_and_send_reminders(db_session, now=NOW))

        assert results["reflectionReminders"]["sent"] == 1
        assert f"/dashboard/sessions/edit/{session.id}" in mock_resend.call_args.args[0]["html"]
        assert "Hi Casey Coach," in mock_resend.call_args.args[0]["html"]

    def test_cpd_gap_and_deadline(self, db_session, coach, mock_resend):
        coach.email_notification_types = [CPD_ACTIVITY_REMINDERS, CPD_DEADLINE_REMINDERS]
        coach.cpd_renewal_date = NOW + timedelta(days=50)
        db_session.add(CPDEntry(user_id=coach.user_id, title="Old course", activity_date=NOW - timedelta(days=30), hours=1))
        db_session.commit()

        results = asyncio.run(check_and_send_reminders(db_session, now=NOW))

        assert results["cpdActivityReminders"]["sent"] == 1
        assert results["cpdDeadlineReminders"]["sent"] == 1
        subjects = [call.args[0]["subject"] for call in mock_resend.call_args_list]
        assert "CPD Deadline Reminder" in subjects
        deadline = next(c.args[0] for c in mock_resend.call_args_list if c.args[0]["subject"] == "CPD Deadline Reminder")
        assert "in 50 days" in deadline["html"]

    def test_push_only_types_trigger_push(self, db_session, coach, mock_resend, mock_webpush):
        db_session.add(
            PushSubscription(
                user_id=coach.user_id,
                subscription=json.dumps({"endpoint": "https://push.example.com/abc", "keys": {}}),
                notification_types=[SESSION_LOGGING_REMINDERS],
            )
        )
        db_session.commit()

        results = asyncio.run(check_and_send_reminders(db_session, now=NOW))

        assert results["sessionReminders"] == {"sent": 1, "failed": 0}
        assert mock_webpush.call_count == 1
        assert mock_resend.call_count == 0
        payload = json.loads(mock_webpush.call_args.kwargs["data"])
        assert payload["title"] == "Session Logging Reminder"

    def test_email_failure_is_counted(self, db_session, coach, mock_resend):
        mock_resend.side_effect = Exception("provider down")
        coach.email_notification_types = [SESSION_LOGGING_REMINDERS]
        db_session.commit()

        results = asyncio.run(check_and_send_reminders(db_session, now=NOW))
        assert results["sessionReminders"] == {"sent": 0, "failed": 1}


class TestReminderEndpoint:
    """POST /api/reminders/check-and-send"""

    def test_wrong_secret(self, client):
        response = client.post("/api/reminders/check-and-send", headers={"Authorization": "Bearer wrong"})
        assert response.status_code == 401

    def test_with_secret(self, client, coach):
        response = client.post(
            "/api/reminders/check-and-send",
            headers={"Authorization": f"Bearer {os.environ['REMINDER_CRON_SECRET']}"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert set(data["results"]) == {
            "sessionReminders",
            "reflectionReminders",
            "cpdActivityReminders",
            "cpdDeadlineReminders",
            "errors",
        }
