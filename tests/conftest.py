# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any app imports
# - In-memory SQLite database shared between the test and the API
# - Supabase-style bearer tokens for authenticated requests
# - Email, Stripe and web push calls are mocked
# =============================================================================

import os
import time

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# app.config reads the environment at import time

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-supabase-jwt-secret")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RESEND_API_KEY", "re_test_key")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_key")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("VAPID_PUBLIC_KEY", "test-vapid-public-key")
os.environ.setdefault("VAPID_PRIVATE_KEY", "test-vapid-private-key")
os.environ.setdefault("VAPID_EMAIL", "push@icflog.com")
os.environ.setdefault("CRON_SECRET_KEY", "test-cron-secret")
os.environ.setdefault("REMINDER_CRON_SECRET", "test-reminder-secret")
os.environ.setdefault("CALENDLY_SIGNING_KEY", "test-calendly-signing-key")
os.environ.setdefault("SECURITY_HEADERS_ENABLED", "true")

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import email_service
from app.database import Base, get_db
from app.main import app
from app.models import Profile

# =============================================================================
# Database
# =============================================================================

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def db_session():
    """Fresh schema for every test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """TestClient without the lifespan; the schema comes from db_session."""
    return TestClient(app)


# =============================================================================
# Auth
# =============================================================================


def make_token(user_id: str, email: str, expires_in: int = 3600) -> str:
    """Access token shaped like the ones Supabase issues."""
    now = int(time.time())
    claims = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "role": "authenticated",
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(claims, os.environ["SUPABASE_JWT_SECRET"], algorithm="HS256")


def auth_headers(profile: Profile) -> dict:
    return {"Authorization": f"Bearer {make_token(profile.user_id, profile.email)}"}


def create_profile(db, user_id: str, email: str, **fields) -> Profile:
    fields.setdefault("email_notification_types", [])
    profile = Profile(user_id=user_id, email=email, **fields)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture
def coach(db_session):
    """A free-tier coach."""
    return create_profile(db_session, "coach-1", "coach@example.com", name="Casey Coach", country="US")


@pytest.fixture
def other_coach(db_session):
    return create_profile(db_session, "coach-2", "other@example.com", name="Other Coach")


@pytest.fixture
def admin(db_session):
    return create_profile(db_session, "admin-1", "admin@icflog.com", name="Ada Admin", role="admin")


@pytest.fixture
def super_admin(db_session):
    return create_profile(db_session, "super-1", "super@icflog.com", name="Sam Super", role="super_admin")


@pytest.fixture
def coach_headers(coach):
    return auth_headers(coach)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


# =============================================================================
# External services
# =============================================================================


def fake_mjml_to_html(mjml_content: str) -> str:
    return f"<html><head><style>p {{}}</style></head><body>{mjml_content}</body></html>"


@pytest.fixture
def mock_resend():
    """Captures every email handed to Resend; MJML compiles to a thin HTML wrapper."""
    with (
        patch("resend.Emails.send", return_value={"id": "email_test_123"}) as send,
        patch("app.email_service.compile_mjml_to_html", side_effect=fake_mjml_to_html),
        patch("app.utils.email_content.compile_mjml_to_html", side_effect=fake_mjml_to_html),
        patch.object(email_service, "BULK_SEND_DELAY_SECONDS", 0),
    ):
        yield send


@pytest.fixture
def mock_webpush():
    with patch("app.services.push_service.webpush") as webpush:
        yield webpush
