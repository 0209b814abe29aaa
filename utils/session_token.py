"""
Session token signing and validation.

Tokens are issued by the storefront login flow and have the form

    <user_id>.<issued_at>.<signature>

where signature = hex HMAC-SHA256(SESSION_SECRET, "<user_id>.<issued_at>").

Security features:
- HMAC-SHA256 signature verification
- Expiry (max age) with a small allowance for clock skew
"""

import hashlib
import hmac
import logging
import time

logger = logging.getLogger(__name__)

CLOCK_SKEW_SECONDS = 60


class SessionTokenError(Exception):
    """Raised when a session token fails validation."""
    pass


def _sign(user_id: int, issued_at: int, secret: str) -> str:
    return hmac.new(
        key=secret.encode('utf-8'),
        msg=f"{user_id}.{issued_at}".encode('utf-8'),
        digestmod=hashlib.sha256
    ).hexdigest()


def issue_session_token(user_id: int, secret: str, issued_at: int | None = None) -> str:
    if issued_at is None:
        issued_at = int(time.time())
    return f"{user_id}.{issued_at}.{_sign(user_id, issued_at, secret)}"


def verify_session_token(token: str, secret: str, max_age_seconds: int) -> int:
    """
    Validates a session token and returns the user id it was issued for.

    Raises:
        SessionTokenError: If the token is malformed, forged or expired
    """
    if not token:
        raise SessionTokenError("No session token provided")

    if not secret:
        raise SessionTokenError("Session secret not configured")

    parts = token.split('.')
    if len(parts) != 3:
        raise SessionTokenError("Malformed session token")

    try:
        user_id = int(parts[0])
        issued_at = int(parts[1])
    except ValueError:
        raise SessionTokenError("Malformed session token")

    expected_signature = _sign(user_id, issued_at, secret)
    if not hmac.compare_digest(expected_signature, parts[2]):
        logger.warning(f"Session token signature mismatch for user {user_id}")
        raise SessionTokenError("Invalid signature")

    age_seconds = time.time() - issued_at
    if age_seconds > max_age_seconds:
        raise SessionTokenError(f"Session expired ({int(age_seconds)}s > {max_age_seconds}s max)")

    if age_seconds < -CLOCK_SKEW_SECONDS:
        raise SessionTokenError("Session token issued in the future")

    return user_id
