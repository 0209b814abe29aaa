"""
Custom exceptions for the storefront backend.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── OrderException
│   ├── OrderNotFoundException
│   ├── InvalidOrderStateException
│   └── OrderOwnershipException
├── WebhookException
│   ├── WebhookAuthenticationException
│   └── WebhookDataIntegrityException
├── ShippingException
│   ├── CourierGatewayException
│   └── TrackingUnavailableException
└── UserException
    ├── NotAuthenticatedException
    └── AdminRequiredException

Usage:
------
Services raise specific exceptions:
    raise OrderNotFoundException(order_id="6f1c...")

Routers catch them and map to HTTP status codes:
    try:
        order = await OrderService.get_for_user(order_id, user_id)
    except OrderNotFoundException:
        raise HTTPException(status_code=404, detail="Order not found")
"""

from .base import StorefrontException
from .order import (
    OrderException,
    OrderNotFoundException,
    InvalidOrderStateException,
    OrderOwnershipException,
)
from .webhook import WebhookException, WebhookAuthenticationException, WebhookDataIntegrityException
from .shipping import ShippingException, CourierGatewayException, TrackingUnavailableException
from .user import UserException, NotAuthenticatedException, AdminRequiredException

__all__ = [
    # Base
    'StorefrontException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'InvalidOrderStateException',
    'OrderOwnershipException',

    # Webhook
    'WebhookException',
    'WebhookAuthenticationException',
    'WebhookDataIntegrityException',

    # Shipping
    'ShippingException',
    'CourierGatewayException',
    'TrackingUnavailableException',

    # User
    'UserException',
    'NotAuthenticatedException',
    'AdminRequiredException',
]
