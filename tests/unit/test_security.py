"""Unit tests for security module."""

import time

from app.core.security import sign_slack_request, verify_slack_signature


class TestSlackSignatureVerification:
    """Test Slack signature verification."""

    def test_valid_signature(self):
        """Test that valid signature passes verification."""
        body = "command=%2Faura-report&text=week"
        timestamp = str(int(time.time()))
        signing_secret = "test_secret"

        signature = sign_slack_request(body, timestamp, signing_secret)

        assert signature.startswith("v0=")
        assert verify_slack_signature(body, timestamp, signature, signing_secret)

    def test_invalid_signature_fails(self):
        """Test that invalid signature fails verification."""
        body = "command=%2Faura-report"
        timestamp = str(int(time.time()))

        assert not verify_slack_signature(body, timestamp, "v0=wrong_signature", "secret")

    def test_tampered_body_fails(self):
        """Test that a signature does not cover a different body."""
        timestamp = str(int(time.time()))
        signature = sign_slack_request("text=week", timestamp, "secret")

        assert not verify_slack_signature("text=year", timestamp, signature, "secret")

    def test_old_timestamp_fails(self):
        """Test that old timestamp fails verification (replay attack protection)."""
        body = "text=week"
        old_timestamp = str(int(time.time()) - 400)
        signature = sign_slack_request(body, old_timestamp, "secret")

        assert verify_slack_signature(body, old_timestamp, signature, "secret") is False

    def test_non_numeric_timestamp_fails(self):
        """Test that a garbage timestamp is rejected."""
        assert not verify_slack_signature("body", "abc", "v0=deadbeef", "secret")

    def test_injected_clock(self):
        """Test the replay window is measured against the given clock."""
        signature = sign_slack_request("body", "1000", "secret")

        assert verify_slack_signature("body", "1000", signature, "secret", now=1200)
        assert not verify_slack_signature("body", "1000", signature, "secret", now=1301)
