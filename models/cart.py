# the active cart of a user: one row per product with the quantity the user
# intends to buy. The cart is emptied once the payment for the order built
# from it has been confirmed.
from pydantic import BaseModel
from sqlalchemy import Column, Integer, ForeignKey, Float, String, UniqueConstraint

from models.base import Base


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False)
    product_id = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Float, nullable=False, default=0.0)

    __table_args__ = (
        UniqueConstraint('user_id', 'product_id', name='uq_cart_items_user_product'),
    )


class CartItemDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    product_id: str | None = None
    quantity: int | None = None
    price: float | None = None
