# =============================================================================
# tests/test_users.py - Profile and Notification Preference Tests
# =============================================================================
# The caller's own profile, last activity date and email notification types.
#
# Run with: pytest tests/test_users.py -v
# =============================================================================

from datetime import datetime

from app.models import CoachingSession, CPDEntry, MentoringSession
from app.shared.notification_types import CALENDLY_EVENTS, LEGACY_CPD_DEADLINES, NOTIFICATION_TYPES

from .conftest import auth_headers, create_profile


class TestProfile:
    """GET/PUT /api/users/me"""

    def test_get_me(self, client, coach, coach_headers):
        response = client.get("/api/users/me", headers=coach_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == coach.user_id
        assert data["role"] == "user"
        assert data["calendly_connected"] is False
        assert data["email_notification_types"] == []

    def test_update(self, client, coach_headers):
        response = client.put(
            "/api/users/me",
            json={
                "name": "  Casey C.  ",
                "icf_level": "PCC",
                "currency": "eur",
                "country": "fr",
                "cpd_renewal_date": "2025-01-31T00:00:00+01:00",
            },
            headers=coach_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Casey C."
        assert data["icf_level"] == "PCC"
        assert data["currency"] == "EUR"
        assert data["country"] == "FR"
        assert data["cpd_renewal_date"] == "2025-01-30T23:00:00"

    def test_invalid_fields(self, client, coach_headers):
        for body in ({"icf_level": "XYZ"}, {"country": "France"}, {"currency": "EURO"}, {"email": "nope"}):
            assert client.put("/api/users/me", json=body, headers=coach_headers).status_code == 422

    def test_email_conflict(self, client, coach_headers, other_coach):
        response = client.put("/api/users/me", json={"email": "OTHER@example.com"}, headers=coach_headers)
        assert response.status_code == 409
        assert response.json()["detail"] == "Email already in use by another account"

    def test_same_email_is_fine(self, client, coach_headers):
        response = client.put("/api/users/me", json={"email": "coach@example.com"}, headers=coach_headers)
        assert response.status_code == 200


class TestLastEntryDate:
    """GET /api/users/me/last-entry-date"""

    def test_no_entries(self, client, coach_headers):
        assert client.get("/api/users/me/last-entry-date", headers=coach_headers).json() == {"last_entry_date": None}

    def test_sessions_take_precedence(self, client, db_session, coach, coach_headers):
        db_session.add(CoachingSession(user_id=coach.user_id, client_name="C", date=datetime(2024, 1, 5), duration=60))
        db_session.add(CPDEntry(user_id=coach.user_id, title="Course", activity_date=datetime(2024, 3, 1), hours=1))
        db_session.commit()

        response = client.get("/api/users/me/last-entry-date", headers=coach_headers)
        assert response.json() == {"last_entry_date": "2024-01-05T00:00:00"}

    def test_falls_back_to_mentoring(self, client, db_session, coach, coach_headers):
        db_session.add(
            MentoringSession(
                user_id=coach.user_id, session_type="supervision", session_date=datetime(2024, 2, 9), duration=60
            )
        )
        db_session.commit()

        response = client.get("/api/users/me/last-entry-date", headers=coach_headers)
        assert response.json() == {"last_entry_date": "2024-02-09T00:00:00"}


class TestNotificationPreferences:
    """GET/PUT /api/notifications/preferences"""

    def test_get(self, client, coach_headers):
        data = client.get("/api/notifications/preferences", headers=coach_headers).json()
        assert data["email_notification_types"] == []
        assert data["available_types"] == NOTIFICATION_TYPES

    def test_update_drops_unknown_types(self, client, coach_headers):
        response = client.put(
            "/api/notifications/preferences",
            json={"notificationTypes": [CALENDLY_EVENTS, "Weekly digest", LEGACY_CPD_DEADLINES, CALENDLY_EVENTS]},
            headers=coach_headers,
        )
        assert response.json()["email_notification_types"] == [CALENDLY_EVENTS, LEGACY_CPD_DEADLINES]

    def test_send_email_requires_enabled_type(self, client, coach_headers, mock_resend):
        response = client.post(
            "/api/notifications/send-email",
            json={"notificationType": CALENDLY_EVENTS, "title": "Booking", "body": "Hello"},
            headers=coach_headers,
        )
        assert response.status_code == 400
        assert response.json()["enabledTypes"] == []
        assert mock_resend.call_count == 0

    def test_test_email_is_always_sent(self, client, coach_headers, mock_resend):
        response = client.post(
            "/api/notifications/send-email",
            json={"notificationType": CALENDLY_EVENTS, "title": "Test notification"},
            headers=coach_headers,
        )
        assert response.status_code == 200
        assert response.json()["sentTo"] == "coach@example.com"
        assert mock_resend.call_args.args[0]["subject"] == "Test notification"

    def test_calendly_test_email(self, client, db_session, mock_resend):
        coach = create_profile(db_session, "cal-1", "cal@example.com", email_notification_types=[CALENDLY_EVENTS])
        response = client.post("/api/test/calendly-email", json={"clientName": "Sam"}, headers=auth_headers(coach))
        assert response.status_code == 200
        assert mock_resend.call_args.args[0]["subject"] == "Test: New Calendly Booking - ICF Log"
