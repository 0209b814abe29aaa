"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for relationships to work correctly.
"""

from models.base import Base
from models.user import User
from models.cart import CartItem
from models.order import Order

__all__ = ['Base', 'User', 'CartItem', 'Order']
