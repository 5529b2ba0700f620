# =============================================================================
# tests/test_mentoring.py - Mentoring and Supervision Tests
# =============================================================================
# Mentor coaching and supervision sessions are stored in whole minutes and
# only keep the fields that belong to their session type.
#
# Run with: pytest tests/test_mentoring.py -v
# =============================================================================

from app.domain.mentoring.schemas import duration_in_minutes
from app.domain.mentoring.service import clear_fields_for_type


class TestDurationConversion:
    """Tests for duration_in_minutes."""

    def test_hours(self):
        assert duration_in_minutes(1.5, "hours") == 90

    def test_fractional_hours_are_rounded(self):
        assert duration_in_minutes(0.33, "hours") == 20

    def test_minutes(self):
        assert duration_in_minutes(45, "minutes") == 45
        assert duration_in_minutes(45, None) == 45


class TestClearFieldsForType:
    """Tests for clear_fields_for_type."""

    def test_mentoring_drops_supervision_fields(self):
        data = {"delivery_type": "Individual", "supervision_type": "Group", "is_formal_supervision": True}
        assert clear_fields_for_type(data, "mentoring") == {
            "delivery_type": "Individual",
            "supervision_type": None,
            "is_formal_supervision": None,
        }

    def test_supervision_drops_delivery_type(self):
        data = {"delivery_type": "Individual", "supervision_type": "Group"}
        assert clear_fields_for_type(data, "supervision")["delivery_type"] is None


class TestMentoringApi:
    """Mentoring endpoints."""

    def test_create_in_hours(self, client, coach_headers):
        response = client.post(
            "/api/mentoring",
            json={
                "session_type": "mentoring",
                "session_date": "2024-04-02T15:00:00Z",
                "duration": 1.5,
                "duration_unit": "hours",
                "provider_name": "Pat Mentor",
                "delivery_type": "Individual",
                "supervision_type": "Peer",
            },
            headers=coach_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["duration"] == 90
        assert data["delivery_type"] == "Individual"
        assert data["supervision_type"] is None

    def test_invalid_session_type(self, client, coach_headers):
        response = client.post(
            "/api/mentoring",
            json={"session_type": "therapy", "session_date": "2024-04-02T15:00:00Z", "duration": 60},
            headers=coach_headers,
        )
        assert response.status_code == 422

    def test_zero_duration(self, client, coach_headers):
        response = client.post(
            "/api/mentoring",
            json={"session_type": "supervision", "session_date": "2024-04-02T15:00:00Z", "duration": 0},
            headers=coach_headers,
        )
        assert response.status_code == 422

    def test_switching_type_clears_fields(self, client, coach_headers):
        created = client.post(
            "/api/mentoring",
            json={
                "session_type": "mentoring",
                "session_date": "2024-04-02T15:00:00Z",
                "duration": 60,
                "delivery_type": "Group",
            },
            headers=coach_headers,
        ).json()

        response = client.put(
            f"/api/mentoring/{created['id']}",
            json={"session_type": "supervision", "supervision_type": "Individual", "is_formal_supervision": True},
            headers=coach_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["session_type"] == "supervision"
        assert data["delivery_type"] is None
        assert data["supervision_type"] == "Individual"
        assert data["duration"] == 60

    def test_not_found(self, client, coach_headers):
        response = client.get("/api/mentoring/4242", headers=coach_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Mentoring session not found"
