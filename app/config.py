import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./icflog.db")

# Supabase Auth - access tokens are HS256 JWTs signed with the project's JWT secret
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET")
SUPABASE_JWT_AUDIENCE = os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION",
        RuntimeWarning,
        stacklevel=2,
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

# Public app URL used in emails, redirects and Stripe return URLs
APP_URL = os.getenv("APP_URL", "https://icflog.com").rstrip("/")
FRONTEND_URL = os.getenv("FRONTEND_URL", APP_URL).rstrip("/")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
RESEND_FROM_EMAIL = os.getenv("RESEND_FROM_EMAIL", "ICF Log <noreply@icflog.com>")
SUPPORT_EMAIL = os.getenv("SUPPORT_EMAIL", "hello@icflog.com")

# Stripe
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")

# Calendly OAuth + webhooks
CALENDLY_CLIENT_ID = os.getenv("CALENDLY_CLIENT_ID")
CALENDLY_CLIENT_SECRET = os.getenv("CALENDLY_CLIENT_SECRET")
CALENDLY_REDIRECT_URI = os.getenv(
    "CALENDLY_REDIRECT_URI", f"{APP_URL}/api/auth/calendly/callback"
)
# Personal access token used when a coach has not connected via OAuth
CALENDLY_API_TOKEN = os.getenv("CALENDLY_API_TOKEN")
CALENDLY_SIGNING_KEY = os.getenv("CALENDLY_SIGNING_KEY")

# Web Push (VAPID)
VAPID_PUBLIC_KEY = os.getenv("VAPID_PUBLIC_KEY")
VAPID_PRIVATE_KEY = os.getenv("VAPID_PRIVATE_KEY")
VAPID_EMAIL = os.getenv("VAPID_EMAIL")

# Cron secrets
CRON_SECRET_KEY = os.getenv("CRON_SECRET_KEY")
REMINDER_CRON_SECRET = os.getenv("REMINDER_CRON_SECRET")

# Cloudflare R2 Configuration (supporting documents)
R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY")
R2_BUCKET_NAME = os.getenv("R2_BUCKET_NAME", "icflog-documents")

# Redis can be switched off for local development and tests
REDIS_ENABLED = os.getenv("REDIS_ENABLED", "true").lower() == "true"
