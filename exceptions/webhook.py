"""
Payment webhook exceptions.
"""

from enums.fault_kind import FaultKind

from .base import StorefrontException


class WebhookException(StorefrontException):
    """Base exception for inbound payment webhook errors."""
    pass


class WebhookAuthenticationException(WebhookException):
    """Raised when the webhook signature is missing, wrong or cannot be computed."""

    fault_kind = FaultKind.AUTHENTICATION
    public_detail = "Invalid signature"

    def __init__(self, reason: str):
        super().__init__(
            f"Webhook authentication failed: {reason}",
            details={'reason': reason}
        )
        self.reason = reason


class WebhookDataIntegrityException(WebhookException):
    """
    Raised when a verified webhook is malformed or lacks the internal order id.

    Distinct from OrderNotFoundException: the sender delivered an event we
    cannot correlate at all, so there is nothing to look up.
    """

    fault_kind = FaultKind.DATA_INTEGRITY
    public_detail = "Malformed webhook payload"

    def __init__(self, event: str | None, reason: str):
        super().__init__(
            f"Webhook event '{event}' rejected: {reason}",
            details={'event': event, 'reason': reason}
        )
        self.event = event
        self.reason = reason
