from enum import Enum


class OrderStatus(str, Enum):
    CREATED = "Created"          # Checkout done, waiting for payment
    PLACED = "Placed"            # Payment confirmed by gateway webhook
    PROCESSING = "Processing"    # Operator is packing the order
    SHIPPING = "Shipping"        # Handed over to the courier
    DELIVERED = "Delivered"      # Final

    @property
    def rank(self) -> int:
        return list(OrderStatus).index(self)

    def is_after(self, other: "OrderStatus") -> bool:
        return self.rank > other.rank
