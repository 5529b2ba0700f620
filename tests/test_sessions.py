# =============================================================================
# tests/test_sessions.py - Coaching Session API Tests
# =============================================================================
# Session logging, the free tier entry limit, localized payment amounts and
# the CSV/Excel/ICF log exports.
#
# Run with: pytest tests/test_sessions.py -v
# =============================================================================

from datetime import datetime, timedelta
from io import BytesIO

from openpyxl import load_workbook

from app.domain.admin.schemas import AdminUserResponse, SubscriptionUserResponse
from app.domain.clients.schemas import ClientResponse
from app.domain.cpd.schemas import CPDResponse
from app.domain.email.schemas import ScheduledEmailResponse
from app.domain.mentoring.schemas import MentoringResponse
from app.domain.sessions.schemas import SessionResponse
from app.models import Client, CoachingSession, CPDEntry
from app.plan_limits import FREE_LIMIT, LIMIT_REACHED_MESSAGE

from .conftest import auth_headers, create_profile


def session_payload(**overrides) -> dict:
    payload = {
        "client_name": "Jordan Lee",
        "date": "2024-03-01T10:00:00Z",
        "duration": 60,
        "types": ["one-on-one"],
        "payment_type": "paid",
        "payment_amount": 120,
    }
    payload.update(overrides)
    return payload


def fill_to_limit(db, user_id: str) -> None:
    """FREE_LIMIT entries split between sessions and CPD."""
    for i in range(FREE_LIMIT - 2):
        db.add(
            CoachingSession(
                user_id=user_id,
                client_name=f"Client {i}",
                date=datetime(2024, 1, 1) + timedelta(days=i),
                duration=60,
            )
        )
    for i in range(2):
        db.add(CPDEntry(user_id=user_id, title=f"Course {i}", activity_date=datetime(2024, 1, 1), hours=1))
    db.commit()


class TestSessionCrud:
    """Create, read, update and delete sessions."""

    def test_create_session(self, client, coach_headers):
        response = client.post("/api/sessions", json=session_payload(), headers=coach_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["client_name"] == "Jordan Lee"
        assert data["duration"] == 60
        assert data["payment_amount"] == 120
        # Stored as naive UTC
        assert data["date"].startswith("2024-03-01T10:00:00")

    def test_offset_dates_are_converted_to_utc(self, client, coach_headers):
        response = client.post(
            "/api/sessions", json=session_payload(date="2024-03-01T12:00:00+02:00"), headers=coach_headers
        )
        assert response.json()["date"].startswith("2024-03-01T10:00:00")

    def test_client_name_falls_back_to_client(self, client, db_session, coach, coach_headers):
        linked = Client(user_id=coach.user_id, name="Riley Fox", email="riley@example.com")
        db_session.add(linked)
        db_session.commit()

        response = client.post(
            "/api/sessions",
            json=session_payload(client_name=None, client_id=linked.id),
            headers=coach_headers,
        )
        assert response.status_code == 201
        assert response.json()["client_name"] == "Riley Fox"
        assert response.json()["client_id"] == linked.id

    def test_client_of_another_coach(self, client, db_session, other_coach, coach_headers):
        theirs = Client(user_id=other_coach.user_id, name="Hidden", email="hidden@example.com")
        db_session.add(theirs)
        db_session.commit()

        response = client.post(
            "/api/sessions", json=session_payload(client_id=theirs.id), headers=coach_headers
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Client not found"

    def test_client_name_required(self, client, coach_headers):
        response = client.post("/api/sessions", json=session_payload(client_name=""), headers=coach_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Client name is required"

    def test_invalid_payment_type(self, client, coach_headers):
        response = client.post(
            "/api/sessions", json=session_payload(payment_type="barter"), headers=coach_headers
        )
        assert response.status_code == 422

    def test_negative_duration(self, client, coach_headers):
        response = client.post("/api/sessions", json=session_payload(duration=-5), headers=coach_headers)
        assert response.status_code == 422

    def test_list_newest_first(self, client, coach_headers):
        client.post("/api/sessions", json=session_payload(date="2024-01-01T09:00:00Z"), headers=coach_headers)
        client.post("/api/sessions", json=session_payload(date="2024-06-01T09:00:00Z"), headers=coach_headers)

        dates = [s["date"][:10] for s in client.get("/api/sessions", headers=coach_headers).json()]
        assert dates == ["2024-06-01", "2024-01-01"]

    def test_update_and_delete(self, client, coach_headers):
        created = client.post("/api/sessions", json=session_payload(), headers=coach_headers).json()

        response = client.put(
            f"/api/sessions/{created['id']}",
            json={"notes": "Explored values", "duration": 75},
            headers=coach_headers,
        )
        assert response.status_code == 200
        assert response.json()["notes"] == "Explored values"
        assert response.json()["duration"] == 75
        assert response.json()["client_name"] == "Jordan Lee"

        response = client.delete(f"/api/sessions/{created['id']}", headers=coach_headers)
        assert response.status_code == 200
        assert client.get(f"/api/sessions/{created['id']}", headers=coach_headers).status_code == 404

    def test_null_required_fields_are_left_unchanged(self, client, coach_headers):
        created = client.post("/api/sessions", json=session_payload(), headers=coach_headers).json()

        response = client.put(
            f"/api/sessions/{created['id']}",
            json={"duration": None, "date": None, "client_name": None, "notes": "Follow-up"},
            headers=coach_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["duration"] == 60
        assert data["date"][:10] == "2024-03-01"
        assert data["client_name"] == "Jordan Lee"
        assert data["notes"] == "Follow-up"

    def test_other_coach_session_not_found(self, client, db_session, coach, other_coach):
        created = client.post(
            "/api/sessions", json=session_payload(), headers=auth_headers(other_coach)
        ).json()
        response = client.get(f"/api/sessions/{created['id']}", headers=auth_headers(coach))
        assert response.status_code == 404
        assert response.json()["detail"] == "Session not found"


class TestResponseSchemas:
    """Response models read straight from ORM rows."""

    def test_response_models_read_attributes(self):
        for schema in (
            AdminUserResponse,
            SubscriptionUserResponse,
            ClientResponse,
            CPDResponse,
            ScheduledEmailResponse,
            MentoringResponse,
            SessionResponse,
        ):
            assert schema.model_config["from_attributes"] is True, schema.__name__

    def test_session_response_from_row(self):
        row = CoachingSession(id=7, user_id="coach-1", client_name="Jordan Lee", date=datetime(2024, 3, 1, 10), duration=60)
        response = SessionResponse.model_validate(row)
        assert response.id == 7
        assert response.client_name == "Jordan Lee"
        assert response.duration == 60


class TestLocalizedAmounts:
    """Payment amounts typed in the coach's number format."""

    def test_german_amount(self, client, db_session):
        coach = create_profile(db_session, "coach-de", "de@example.com", country="DE")
        response = client.post(
            "/api/sessions", json=session_payload(payment_amount="1.234,50"), headers=auth_headers(coach)
        )
        assert response.status_code == 201
        assert response.json()["payment_amount"] == 1234.5

    def test_us_amount_string(self, client, coach_headers):
        response = client.post(
            "/api/sessions", json=session_payload(payment_amount="1,234.50"), headers=coach_headers
        )
        assert response.json()["payment_amount"] == 1234.5

    def test_invalid_amount(self, client, coach_headers):
        response = client.post(
            "/api/sessions", json=session_payload(payment_amount="lots"), headers=coach_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid payment amount: Invalid number format"


class TestFreeLimit:
    """Free coaches can log FREE_LIMIT entries in total."""

    def test_limit_blocks_new_session(self, client, db_session, coach, coach_headers):
        fill_to_limit(db_session, coach.user_id)

        response = client.post("/api/sessions", json=session_payload(), headers=coach_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == LIMIT_REACHED_MESSAGE
        assert response.headers["X-Upgrade-Required"] == "true"

    def test_limit_blocks_new_cpd(self, client, db_session, coach, coach_headers):
        fill_to_limit(db_session, coach.user_id)

        response = client.post(
            "/api/cpd",
            json={"title": "Course", "activity_date": "2024-04-01T00:00:00Z", "hours": 2},
            headers=coach_headers,
        )
        assert response.status_code == 403

    def test_subscriber_has_no_limit(self, client, db_session):
        coach = create_profile(
            db_session, "coach-pro", "pro@example.com", subscription_status="active", subscription_plan="pro_monthly"
        )
        fill_to_limit(db_session, coach.user_id)

        response = client.post("/api/sessions", json=session_payload(), headers=auth_headers(coach))
        assert response.status_code == 201

    def test_editing_is_allowed_at_limit(self, client, db_session, coach, coach_headers):
        fill_to_limit(db_session, coach.user_id)
        existing = db_session.query(CoachingSession).filter(CoachingSession.user_id == coach.user_id).first()

        response = client.put(f"/api/sessions/{existing.id}", json={"notes": "Later"}, headers=coach_headers)
        assert response.status_code == 200


class TestSessionExports:
    """CSV, Excel and ICF coaching log downloads."""

    def test_csv_export(self, client, coach_headers):
        client.post("/api/sessions", json=session_payload(), headers=coach_headers)

        response = client.get("/api/sessions/export?format=csv", headers=coach_headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "coaching_sessions_" in response.headers["content-disposition"]
        assert response.text.splitlines()[0].startswith("Client Name,Start Date")
        assert "Jordan Lee" in response.text

    def test_xlsx_export(self, client, coach_headers):
        client.post("/api/sessions", json=session_payload(), headers=coach_headers)

        response = client.get("/api/sessions/export?format=xlsx", headers=coach_headers)
        ws = load_workbook(BytesIO(response.content)).active
        assert ws.title == "Sessions Data"
        assert ws["A2"].value == "Jordan Lee"

    def test_unknown_format(self, client, coach_headers):
        response = client.get("/api/sessions/export?format=pdf", headers=coach_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Format must be csv or xlsx"

    def test_icf_log_oldest_first_with_contact(self, client, db_session, coach, coach_headers):
        linked = Client(user_id=coach.user_id, name="Riley Fox", email="riley@example.com")
        db_session.add(linked)
        db_session.commit()
        client.post(
            "/api/sessions",
            json=session_payload(client_id=linked.id, client_name="Riley Fox", date="2024-05-02T09:00:00Z"),
            headers=coach_headers,
        )
        client.post(
            "/api/sessions",
            json=session_payload(date="2024-02-01T09:00:00Z", payment_type="proBono", duration=30),
            headers=coach_headers,
        )

        response = client.get("/api/sessions/export/icf-log", headers=coach_headers)
        assert response.status_code == 200
        assert "icf_client_coaching_log_" in response.headers["content-disposition"]

        ws = load_workbook(BytesIO(response.content)).active
        assert ws["A4"].value == "Jordan Lee"
        assert ws["G4"].value == 0
        assert ws["H4"].value == 0.5
        assert ws["A5"].value == "Riley Fox"
        assert ws["B5"].value == "riley@example.com"
        assert ws["G5"].value == 1
