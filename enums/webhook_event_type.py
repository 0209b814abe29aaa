from enum import Enum


class WebhookEventType(str, Enum):
    # Only event with side effects; everything else is acknowledged and ignored
    PAYMENT_LINK_PAID = "payment_link.paid"
