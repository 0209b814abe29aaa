import hashlib
import hmac
import json
import logging

from pydantic import TypeAdapter, ValidationError

from enums.webhook_event_type import WebhookEventType
from exceptions.webhook import WebhookAuthenticationException, WebhookDataIntegrityException
from models.webhook import PaymentLinkPaidEvent, UnhandledWebhookEvent, WebhookEnvelope, WebhookEvent

logger = logging.getLogger(__name__)

_envelope_adapter = TypeAdapter(WebhookEnvelope)


def verify_signature(payload: bytes, signature_header: str | None, secret: str | None) -> None:
    """
    Validate the HMAC-SHA256 signature of a payment gateway webhook.

    The digest is computed over the exact raw body bytes; any reformatting of
    the JSON would change it. Fails closed: a missing header, a missing secret
    or any error while computing the digest is an authentication failure.

    Raises:
        WebhookAuthenticationException: signature missing, invalid or not computable
    """
    if not signature_header:
        raise WebhookAuthenticationException("missing signature header")
    if not secret:
        raise WebhookAuthenticationException("webhook secret not configured")

    try:
        generated_signature = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
        is_valid = hmac.compare_digest(generated_signature, signature_header.strip().lower())
    except (TypeError, ValueError, UnicodeError) as e:
        raise WebhookAuthenticationException(f"signature could not be computed: {e}") from e

    if not is_valid:
        raise WebhookAuthenticationException("signature mismatch")


def parse_event(payload: bytes) -> WebhookEvent:
    """
    Parse a verified webhook body into a typed event.

    `payment_link.paid` must match PaymentLinkPaidEvent; any other event type
    is returned as UnhandledWebhookEvent.

    Raises:
        WebhookDataIntegrityException: body is not a JSON object with an event type,
            or a payment_link.paid event does not have the expected shape
    """
    try:
        data = json.loads(payload)
    except ValueError as e:
        raise WebhookDataIntegrityException(None, f"body is not valid JSON: {e}") from e

    try:
        envelope = _envelope_adapter.validate_python(data)
    except ValidationError as e:
        raise WebhookDataIntegrityException(None, f"body has no event type: {e.errors()}") from e

    if envelope.event != WebhookEventType.PAYMENT_LINK_PAID.value:
        return UnhandledWebhookEvent.model_validate(data)

    try:
        return PaymentLinkPaidEvent.model_validate(data)
    except ValidationError as e:
        raise WebhookDataIntegrityException(envelope.event, f"malformed payload: {e.errors()}") from e
