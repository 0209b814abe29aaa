from enum import Enum


class FaultKind(str, Enum):
    AUTHENTICATION = "authentication"  # webhook signature missing or wrong
    DATA_INTEGRITY = "data_integrity"  # verified webhook we cannot correlate
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"  # courier aggregator
    INTERNAL = "internal"
