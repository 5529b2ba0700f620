# =============================================================================
# tests/test_webhook_security.py - Webhook Signature Tests
# =============================================================================
# Stripe signs "t=<timestamp>,v1=<hex hmac>" over "<timestamp>.<body>".
# Calendly signs the body with a base64 HMAC-SHA256.
#
# Run with: pytest tests/test_webhook_security.py -v
# =============================================================================

import time

from app.webhook_security import (
    compute_hmac_sha256,
    create_webhook_signature,
    is_valid_stripe_signature,
    parse_stripe_signature_header,
    verify_timestamp,
)

SECRET = "whsec_unit_test"
BODY = b'{"id": "evt_1", "type": "customer.subscription.updated"}'


class TestStripeSignature:
    """Tests for Stripe-Signature verification."""

    def test_parse_header(self):
        timestamp, signatures = parse_stripe_signature_header("t=123,v1=abc,v1=def,v0=old")
        assert timestamp == "123"
        assert signatures == ["abc", "def"]

    def test_valid_signature(self):
        header = create_webhook_signature(SECRET, BODY)
        assert is_valid_stripe_signature(SECRET, BODY, header) is True

    def test_tampered_body(self):
        header = create_webhook_signature(SECRET, BODY)
        assert is_valid_stripe_signature(SECRET, BODY + b" ", header) is False

    def test_wrong_secret(self):
        header = create_webhook_signature("whsec_other", BODY)
        assert is_valid_stripe_signature(SECRET, BODY, header) is False

    def test_any_v1_signature_may_match(self):
        timestamp = str(int(time.time()))
        good = compute_hmac_sha256(SECRET, f"{timestamp}.".encode() + BODY)
        header = f"t={timestamp},v1=deadbeef,v1={good}"
        assert is_valid_stripe_signature(SECRET, BODY, header) is True

    def test_old_timestamp_rejected(self):
        timestamp = str(int(time.time()) - 600)
        good = compute_hmac_sha256(SECRET, f"{timestamp}.".encode() + BODY)
        assert is_valid_stripe_signature(SECRET, BODY, f"t={timestamp},v1={good}") is False

    def test_malformed_header(self):
        assert is_valid_stripe_signature(SECRET, BODY, "garbage") is False
        assert is_valid_stripe_signature(SECRET, BODY, "") is False


class TestTimestamp:
    """Tests for verify_timestamp."""

    def test_recent(self):
        assert verify_timestamp(str(int(time.time()) - 10)) is True

    def test_not_a_number(self):
        assert verify_timestamp("yesterday") is False
        assert verify_timestamp(None) is False


class TestCalendlySignature:
    """Tests for the Calendly signature format."""

    def test_base64_signature_is_stable(self):
        first = create_webhook_signature(SECRET, BODY, provider="calendly")
        second = create_webhook_signature(SECRET, BODY, provider="calendly")
        assert first == second
        assert first.endswith("=")
