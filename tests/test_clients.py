# =============================================================================
# tests/test_clients.py - Client API Tests
# =============================================================================
# Coaches manage their own client list. Another coach's client must look
# exactly like a client that does not exist.
#
# Run with: pytest tests/test_clients.py -v
# =============================================================================

from datetime import datetime

from app.models import Client, CoachingSession, Profile

from .conftest import auth_headers, make_token


def add_client(db, user_id: str, name: str = "Jordan Lee", email: str = "jordan@example.com") -> Client:
    client = Client(user_id=user_id, name=name, email=email)
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


class TestClientAuth:
    """Requests without a valid token are rejected."""

    def test_missing_token(self, client):
        response = client.get("/api/clients")
        assert response.status_code in (401, 403)

    def test_invalid_token(self, client):
        response = client.get("/api/clients", headers={"Authorization": "Bearer not.a.jwt"})
        assert response.status_code == 401

    def test_malformed_token(self, client):
        response = client.get("/api/clients", headers={"Authorization": "Bearer abc"})
        assert response.status_code == 401
        assert "Invalid token format" in response.json()["detail"]

    def test_first_request_creates_profile(self, client, db_session):
        token = make_token("brand-new-user", "new@example.com")
        response = client.get("/api/clients", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert db_session.query(Profile).filter(Profile.user_id == "brand-new-user").count() == 1


class TestClientCrud:
    """Create, read, update and delete clients."""

    def test_create_client(self, client, coach_headers):
        response = client.post(
            "/api/clients",
            json={"name": "  Jordan Lee  ", "email": "Jordan@Example.com", "phone": "+44 20 7946 0958"},
            headers=coach_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Jordan Lee"
        assert data["email"] == "jordan@example.com"
        assert data["phone"] == "+44 20 7946 0958"

    def test_create_requires_valid_email(self, client, coach_headers):
        response = client.post(
            "/api/clients", json={"name": "Jordan", "email": "not-an-email"}, headers=coach_headers
        )
        assert response.status_code == 422

    def test_list_is_sorted_by_name(self, client, db_session, coach, coach_headers):
        add_client(db_session, coach.user_id, name="Zed")
        add_client(db_session, coach.user_id, name="Abby")
        response = client.get("/api/clients", headers=coach_headers)
        assert [c["name"] for c in response.json()] == ["Abby", "Zed"]

    def test_update_client(self, client, db_session, coach, coach_headers):
        existing = add_client(db_session, coach.user_id)
        response = client.put(
            f"/api/clients/{existing.id}",
            json={"notes": "Prefers morning sessions", "name": ""},
            headers=coach_headers,
        )
        assert response.status_code == 200
        assert response.json()["notes"] == "Prefers morning sessions"
        assert response.json()["name"] == "Jordan Lee"

    def test_delete_keeps_sessions(self, client, db_session, coach, coach_headers):
        existing = add_client(db_session, coach.user_id)
        session = CoachingSession(
            user_id=coach.user_id,
            client_id=existing.id,
            client_name="Jordan Lee",
            date=datetime(2024, 5, 1, 9, 0),
            duration=60,
        )
        db_session.add(session)
        db_session.commit()

        response = client.delete(f"/api/clients/{existing.id}", headers=coach_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Client deleted successfully"}

        db_session.expire_all()
        kept = db_session.get(CoachingSession, session.id)
        assert kept is not None
        assert kept.client_id is None
        assert kept.client_name == "Jordan Lee"


class TestClientOwnership:
    """Another coach's clients are invisible."""

    def test_other_coach_client_is_not_found(self, client, db_session, coach, other_coach):
        theirs = add_client(db_session, other_coach.user_id)
        headers = auth_headers(coach)

        assert client.get(f"/api/clients/{theirs.id}", headers=headers).status_code == 404
        assert client.put(f"/api/clients/{theirs.id}", json={"notes": "x"}, headers=headers).status_code == 404
        assert client.delete(f"/api/clients/{theirs.id}", headers=headers).status_code == 404
        assert client.get("/api/clients", headers=headers).json() == []

    def test_not_found_message(self, client, coach_headers):
        response = client.get("/api/clients/9999", headers=coach_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Client not found"
