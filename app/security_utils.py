"""
Security helpers: encryption of third-party tokens at rest, signed OAuth
state values and HTML cleanup.
"""

import base64
import hashlib
import logging
import secrets
from typing import Optional

import bleach
from cryptography.fernet import Fernet, InvalidToken
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .config import SECRET_KEY

logger = logging.getLogger(__name__)

OAUTH_STATE_SALT = "calendly-oauth-state"
OAUTH_STATE_MAX_AGE = 600


# ============================================================================
# TOKEN ENCRYPTION
# ============================================================================


def _get_fernet() -> Fernet:
    # Fernet keys are 32 url-safe base64 bytes; derive one from SECRET_KEY
    digest = hashlib.sha256(SECRET_KEY.encode()).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt_token(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return _get_fernet().encrypt(value.encode()).decode()


def decrypt_token(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        return _get_fernet().decrypt(value.encode()).decode()
    except InvalidToken:
        logger.error("❌ Failed to decrypt stored token - SECRET_KEY may have changed")
        return None


# ============================================================================
# SIGNED STATE
# ============================================================================


def generate_oauth_state(user_id: str) -> str:
    """Signed, time-limited state value binding an OAuth redirect to a user"""
    serializer = URLSafeTimedSerializer(SECRET_KEY)
    return serializer.dumps({"uid": user_id, "nonce": secrets.token_urlsafe(8)}, salt=OAUTH_STATE_SALT)


def verify_oauth_state(state: str, max_age: int = OAUTH_STATE_MAX_AGE) -> Optional[str]:
    """Return the user id carried by a state value, or None if invalid/expired"""
    serializer = URLSafeTimedSerializer(SECRET_KEY)
    try:
        data = serializer.loads(state, salt=OAUTH_STATE_SALT, max_age=max_age)
    except SignatureExpired:
        logger.warning("⚠️ OAuth state expired")
        return None
    except BadSignature:
        logger.warning("⚠️ Invalid OAuth state signature")
        return None
    return data.get("uid")


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================


def strip_html_tags(html_content: str) -> str:
    """Remove every tag, keeping the text (entities stay escaped)"""
    return bleach.clean(html_content, tags=[], attributes={}, strip=True)


def constant_time_compare(a: str, b: str) -> bool:
    """Compare two strings in constant time to prevent timing attacks"""
    return secrets.compare_digest(a.encode(), b.encode())
