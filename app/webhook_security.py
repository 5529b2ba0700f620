"""
Webhook signature verification for Stripe and Calendly.

- Constant-time signature comparison
- Timestamp tolerance on Stripe events (replay protection)
- Raw body is read once and returned so handlers parse exactly what was signed
"""

import base64
import hashlib
import hmac
import logging
import time
from typing import Optional

from fastapi import HTTPException, Request

logger = logging.getLogger(__name__)

# Maximum age of webhook in seconds (5 minutes)
MAX_WEBHOOK_AGE_SECONDS = 300


def constant_time_compare(a: str, b: str) -> bool:
    if not a or not b:
        return False
    return hmac.compare_digest(a, b)


def compute_hmac_sha256(secret: str, payload: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def compute_hmac_sha256_base64(secret: str, payload: bytes) -> str:
    signature = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).digest()
    return base64.b64encode(signature).decode("utf-8")


def verify_timestamp(timestamp: Optional[str], max_age: int = MAX_WEBHOOK_AGE_SECONDS) -> bool:
    try:
        age = abs(int(time.time()) - int(timestamp))
    except (ValueError, TypeError):
        logger.warning(f"🚫 Invalid webhook timestamp format: {timestamp}")
        return False

    if age > max_age:
        logger.warning(f"🚫 Webhook timestamp too old: {age}s (max: {max_age}s)")
        return False
    return True


def parse_stripe_signature_header(header: str) -> tuple[Optional[str], list[str]]:
    """Split "t=<ts>,v1=<sig>[,v1=<sig>...]" into the timestamp and all v1 signatures"""
    timestamp = None
    signatures = []
    for item in header.split(","):
        key, _, value = item.strip().partition("=")
        if key == "t":
            timestamp = value
        elif key == "v1" and value:
            signatures.append(value)
    return timestamp, signatures


def is_valid_stripe_signature(secret: str, payload: bytes, header: str) -> bool:
    timestamp, signatures = parse_stripe_signature_header(header or "")
    if not timestamp or not signatures:
        logger.warning("🚫 Stripe webhook invalid signature format")
        return False
    if not verify_timestamp(timestamp):
        return False

    signed_payload = timestamp.encode("utf-8") + b"." + payload
    expected = compute_hmac_sha256(secret, signed_payload)
    return any(constant_time_compare(expected, candidate) for candidate in signatures)


async def verify_stripe_webhook(request: Request, secret: Optional[str]) -> bytes:
    """
    Verify the Stripe-Signature header against the raw body.

    Raises:
        HTTPException(400): when the secret is missing or the signature does not match
    """
    raw_body = await request.body()
    header = request.headers.get("Stripe-Signature", "")

    if not secret or not is_valid_stripe_signature(secret, raw_body, header):
        logger.warning("🚫 Stripe webhook signature verification failed")
        raise HTTPException(status_code=400, detail="Webhook signature verification failed")

    logger.debug("✅ Stripe webhook signature verified")
    return raw_body


async def verify_calendly_webhook(request: Request, signing_key: Optional[str]) -> bytes:
    """
    Verify a Calendly webhook when both a signing key and a signature are present.

    The signature is the base64 HMAC-SHA256 of the raw body. Deliveries without
    the header are accepted so that webhook subscriptions created without a
    signing key keep working.
    """
    raw_body = await request.body()
    signature = request.headers.get("Calendly-Webhook-Signature", "")

    if signing_key and signature:
        expected = compute_hmac_sha256_base64(signing_key, raw_body)
        if not constant_time_compare(expected, signature):
            logger.warning("🚫 Calendly webhook signature mismatch")
            raise HTTPException(status_code=401, detail="Invalid signature")
        logger.debug("✅ Calendly webhook signature verified")

    return raw_body


def create_webhook_signature(secret: str, payload: bytes, provider: str = "stripe") -> str:
    """Build a signature header value in the provider's format (used for tests and replays)"""
    if provider == "calendly":
        return compute_hmac_sha256_base64(secret, payload)

    timestamp = int(time.time())
    signature = compute_hmac_sha256(secret, f"{timestamp}.".encode("utf-8") + payload)
    return f"t={timestamp},v1={signature}"
