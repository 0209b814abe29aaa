from enum import Enum


class BroadcastEvent(str, Enum):
    NEW_ORDER = "newOrder"
    ORDER_STATUS_UPDATED = "orderStatusUpdated"
