from enum import Enum


class AdminStatus(str, Enum):
    # Paid order whose shipment could not be created; cleared by an operator retry
    SHIPPING_ERROR = "shipping_error"
