"""Slack request signature verification."""

import hmac
import hashlib
import time
from typing import Optional


def verify_slack_signature(
    body: str,
    timestamp: str,
    signature: str,
    signing_secret: str,
    max_age_seconds: int = 300,
    now: Optional[int] = None
) -> bool:
    """Verify Slack request signature using HMAC SHA256."""
    if not signature.startswith("v0="):
        return False

    try:
        request_time = int(timestamp)
    except ValueError:
        return False

    current_time = int(time.time()) if now is None else now
    if abs(current_time - request_time) > max_age_seconds:
        return False

    expected_signature = sign_slack_request(body, timestamp, signing_secret)
    return hmac.compare_digest(expected_signature, signature)


def sign_slack_request(body: str, timestamp: str, signing_secret: str) -> str:
    """Compute the ``v0=`` signature Slack sends in ``X-Slack-Signature``."""
    sig_basestring = f"v0:{timestamp}:{body}"
    return (
        "v0="
        + hmac.new(
            signing_secret.encode(),
            sig_basestring.encode(),
            hashlib.sha256,
        ).hexdigest()
    )
