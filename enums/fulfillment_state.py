from enum import Enum


class FulfillmentState(str, Enum):
    """
    Derived position of an order in the fulfillment flow.

    Not stored; computed from payment status, admin flag and shipment details.
    """
    PENDING_PAYMENT = "pending_payment"
    PAID_NO_SHIPMENT = "paid_no_shipment"
    SHIPMENT_CREATED = "shipment_created"
    AWB_ASSIGNED = "awb_assigned"
    SHIPMENT_ERROR = "shipment_error"
