"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests. The environment is set up BEFORE `config`
is imported anywhere, so every module sees the test configuration.
"""

import hashlib
import hmac
import json
import os
import sys
import tempfile

_TEST_DIR = tempfile.mkdtemp(prefix="storefront-tests-")

os.environ["RUNTIME_ENVIRONMENT"] = "TEST"
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/storefront-test.db"
os.environ["PAYMENT_WEBHOOK_SECRET"] = "test_webhook_secret_1234567890abcdef1234"
os.environ["SESSION_SECRET"] = "test_session_secret_1234567890abcdef1234"
os.environ["ADMIN_ID_LIST"] = "900"
os.environ["COURIER_API_URL"] = "http://courier.invalid"
os.environ["COURIER_API_TOKEN"] = "test-courier-token"
os.environ["CORS_ALLOWED_ORIGINS"] = ""

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio

import config
from db import create_db_and_tables, drop_db_and_tables, get_db_session, session_commit
from models.cart import CartItemDTO
from models.order import OrderDTO, OrderItemDTO
from models.shipment import ShipmentCreatedDTO, CourierAssignmentDTO
from models.tracking import TrackingSnapshotDTO, TrackingScanDTO
from models.user import UserDTO
from repositories.cart import CartRepository
from repositories.order import OrderRepository
from repositories.user import UserRepository
from services.broadcaster import EventBroadcaster
from services.courier_gateway import CourierGatewayClient
from utils.session_token import issue_session_token

ADMIN_USER_ID = 900
CUSTOMER_ID = 1
OTHER_CUSTOMER_ID = 2


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def db():
    """Fresh schema for every test (SQLite file in a temp directory)."""
    await drop_db_and_tables()
    await create_db_and_tables()
    yield
    await drop_db_and_tables()


@pytest_asyncio.fixture
async def customers(db):
    """Two shoppers and one operator account."""
    async with get_db_session() as session:
        for user_id, email in ((CUSTOMER_ID, "buyer@example.com"),
                               (OTHER_CUSTOMER_ID, "other@example.com"),
                               (ADMIN_USER_ID, "ops@example.com")):
            await UserRepository.create(UserDTO(id=user_id, email=email, name=f"User {user_id}"), session)
        await session_commit(session)
    return CUSTOMER_ID


@pytest.fixture
def create_order(customers):
    """Factory: creates a pending order (and a cart) for CUSTOMER_ID, returns its id."""

    async def _create_order(user_id: int = CUSTOMER_ID, with_cart: bool = True, **overrides) -> str:
        order_dto = OrderDTO(
            user_id=user_id,
            total_amount=2998.0,
            items_snapshot=[OrderItemDTO(product_id="p-1", name="Silk Saree", quantity=2, unit_price=1499.0)],
            shipping_address={
                "name": "Asha Rao", "phone": "9876543210", "address1": "12 MG Road",
                "city": "Bengaluru", "state": "KA", "postal_code": "560001", "country": "India",
            },
            customer_email="buyer@example.com",
            **overrides,
        )
        async with get_db_session() as session:
            order_id = await OrderRepository.create(order_dto, session)
            if with_cart:
                await CartRepository.add_item(
                    CartItemDTO(user_id=user_id, product_id="p-1", quantity=2, price=1499.0), session
                )
            await session_commit(session)
        return order_id

    return _create_order


async def load_order(order_id: str) -> OrderDTO | None:
    async with get_db_session() as session:
        return await OrderRepository.get_by_id(order_id, session)


@pytest.fixture
def get_order():
    return load_order


# ============================================================================
# Collaborator Fixtures
# ============================================================================

@pytest.fixture
def courier_gateway():
    """Courier gateway whose calls all succeed."""
    gateway = AsyncMock(spec=CourierGatewayClient)
    gateway.create_shipment.return_value = ShipmentCreatedDTO(
        aggregator_order_id="SR-1001", shipment_id="SH-2001", status="NEW"
    )
    gateway.assign_courier.return_value = CourierAssignmentDTO(
        awb_code="AWB123456", courier_name="Delhivery", status="AWB Assigned"
    )
    gateway.track_shipment.return_value = TrackingSnapshotDTO(
        awb_code="AWB123456",
        scans=[
            TrackingScanDTO(date="2026-10-01 10:00", activity="Picked up", location="Bengaluru"),
            TrackingScanDTO(date="2026-10-02 08:30", activity="In transit", location="Hyderabad"),
        ],
    )
    return gateway


@pytest.fixture
def broadcaster():
    return AsyncMock(spec=EventBroadcaster)


# ============================================================================
# HTTP Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def app(db, courier_gateway, broadcaster):
    from server import create_app

    app = create_app(courier_gateway=courier_gateway, broadcaster=broadcaster)
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


def auth_headers(user_id: int) -> dict:
    return {"Authorization": f"Bearer {issue_session_token(user_id, config.SESSION_SECRET)}"}


@pytest.fixture
def customer_headers():
    return auth_headers(CUSTOMER_ID)


@pytest.fixture
def other_customer_headers():
    return auth_headers(OTHER_CUSTOMER_ID)


@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN_USER_ID)


# ============================================================================
# Webhook Helpers
# ============================================================================

def paid_event_body(order_id) -> bytes:
    return json.dumps({
        "entity": "event",
        "event": "payment_link.paid",
        "payload": {
            "payment_link": {
                "entity": {
                    "id": "plink_Test123",
                    "status": "paid",
                    "amount": 299800,
                    "notes": {"internal_order_id": order_id},
                }
            },
        },
    }).encode("utf-8")


def sign(body: bytes, secret: str | None = None) -> str:
    secret = secret or config.PAYMENT_WEBHOOK_SECRET
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


@pytest.fixture
def deliver_webhook(client):
    """Posts a webhook body signed with the configured secret (or an explicit signature)."""

    async def _deliver(body: bytes, signature: str | None = "sign") -> httpx.Response:
        headers = {"Content-Type": "application/json"}
        if signature == "sign":
            headers[config.PAYMENT_WEBHOOK_SIGNATURE_HEADER] = sign(body)
        elif signature is not None:
            headers[config.PAYMENT_WEBHOOK_SIGNATURE_HEADER] = signature
        return await client.post("/orders/webhook", content=body, headers=headers)

    return _deliver
