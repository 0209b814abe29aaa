from enum import Enum


class FulfillmentOutcome(str, Enum):
    """
    Result of handling one payment confirmation.

    All outcomes are acknowledged to the payment gateway with 200.
    """
    SHIPMENT_CREATED = "shipment_created"
    SHIPPING_ERROR = "shipping_error"
    ALREADY_PROCESSED = "already_processed"
