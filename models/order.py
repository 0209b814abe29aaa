import uuid
from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, String, JSON, func, CheckConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.admin_status import AdminStatus
from enums.fulfillment_state import FulfillmentState
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from models.base import Base


def generate_order_id() -> str:
    return uuid.uuid4().hex


class Order(Base):
    __tablename__ = 'orders'

    id = Column(String(32), primary_key=True, default=generate_order_id)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False)
    total_amount = Column(Float, nullable=False)
    created_at = Column(DateTime, default=func.now())
    paid_at = Column(DateTime, nullable=True)

    payment_status = Column(SQLEnum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING)
    status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.CREATED)
    # Set to SHIPPING_ERROR when the courier integration failed after payment; cleared by an operator retry
    admin_status = Column(SQLEnum(AdminStatus), nullable=True)

    # Items Snapshot (JSON)
    # Product reference, name, quantity and unit price copied at checkout, never live-linked to the catalog
    # Format: [{"product_id": "p-1", "name": "Silk Saree", "quantity": 2, "unit_price": 1499.0}]
    items_snapshot = Column(JSON, nullable=False, default=list)

    # Delivery address copied at checkout (JSON)
    # Format: {"name": "...", "phone": "...", "address1": "...", "city": "...", "state": "...",
    #          "postal_code": "...", "country": "India"}
    shipping_address = Column(JSON, nullable=True)
    customer_email = Column(String, nullable=True)

    # Shipment details, populated by the fulfillment flow
    # aggregator ids are stored as soon as the shipment exists, the AWB once a courier is assigned
    shipment_aggregator_order_id = Column(String, nullable=True)
    shipment_id = Column(String, nullable=True)
    shipment_awb_code = Column(String, nullable=True)
    shipment_courier_name = Column(String, nullable=True)
    shipment_status = Column(String, nullable=True)

    # Relations
    user = relationship('User', backref='orders')

    __table_args__ = (
        CheckConstraint('total_amount >= 0', name='check_order_total_amount_positive'),
    )

    @property
    def shipment_details(self) -> dict | None:
        if self.shipment_id is None:
            return None
        return {
            "aggregator_order_id": self.shipment_aggregator_order_id,
            "shipment_id": self.shipment_id,
            "awb_code": self.shipment_awb_code,
            "courier_name": self.shipment_courier_name,
            "status": self.shipment_status,
        }


class OrderItemDTO(BaseModel):
    product_id: str
    name: str | None = None
    quantity: int
    unit_price: float


class ShipmentDetailsDTO(BaseModel):
    aggregator_order_id: str | None = None
    shipment_id: str | None = None
    awb_code: str | None = None
    courier_name: str | None = None
    status: str | None = None


class OrderDTO(BaseModel):
    id: str | None = None
    user_id: int | None = None
    total_amount: float | None = None
    created_at: datetime | None = None
    paid_at: datetime | None = None
    payment_status: PaymentStatus | None = None
    status: OrderStatus | None = None
    admin_status: AdminStatus | None = None
    items_snapshot: list[OrderItemDTO] = []
    shipping_address: dict | None = None
    customer_email: str | None = None
    shipment_details: ShipmentDetailsDTO | None = None

    @property
    def awb_code(self) -> str | None:
        return self.shipment_details.awb_code if self.shipment_details else None

    @property
    def fulfillment_state(self) -> FulfillmentState:
        if self.payment_status != PaymentStatus.PAID:
            return FulfillmentState.PENDING_PAYMENT
        if self.awb_code:
            return FulfillmentState.AWB_ASSIGNED
        if self.admin_status == AdminStatus.SHIPPING_ERROR:
            return FulfillmentState.SHIPMENT_ERROR
        if self.shipment_details is not None:
            return FulfillmentState.SHIPMENT_CREATED
        return FulfillmentState.PAID_NO_SHIPMENT

    def to_payload(self) -> dict:
        """
        Order document as served to storefront clients and pushed on the real-time channel.

        Keys follow the storefront's JSON conventions (camelCase, `_id`).
        """
        shipment = None
        if self.shipment_details is not None:
            shipment = {
                "shiprocketOrderId": self.shipment_details.aggregator_order_id,
                "shipmentId": self.shipment_details.shipment_id,
                "awbCode": self.shipment_details.awb_code,
                "courierName": self.shipment_details.courier_name,
                "status": self.shipment_details.status,
            }
        return {
            "_id": self.id,
            "user": self.user_id,
            "products": [
                {
                    "id": item.product_id,
                    "name": item.name,
                    "quantity": item.quantity,
                    "price": item.unit_price,
                }
                for item in self.items_snapshot
            ],
            "totalAmount": self.total_amount,
            "address": self.shipping_address,
            "email": self.customer_email,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "paymentStatus": self.payment_status.value if self.payment_status else None,
            "status": self.status.value if self.status else None,
            "deliveryStatus": self.status.value if self.status else None,
            "adminStatus": self.admin_status.value if self.admin_status else None,
            "shipmentDetails": shipment,
        }
