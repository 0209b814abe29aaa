"""
Courier Gateway Client

Thin async client for the courier aggregator (Shiprocket-compatible API):
- create a shipment for a paid order
- assign a courier and obtain the airway bill (AWB)
- fetch tracking scans for an AWB

No retries, no caching: every method is one HTTP request and either returns
the parsed result or raises CourierGatewayException carrying the upstream body.
"""

import asyncio
import json
import logging

import aiohttp

from exceptions.shipping import CourierGatewayException
from models.order import OrderDTO
from models.shipment import ShipmentCreatedDTO, CourierAssignmentDTO
from models.tracking import TrackingSnapshotDTO, TrackingScanDTO

logger = logging.getLogger(__name__)

# Package dimensions sent when the catalog has none (cm / kg)
DEFAULT_PACKAGE = {"length": 10, "breadth": 10, "height": 5, "weight": 0.5}


class CourierGatewayClient:
    CREATE_SHIPMENT = "create_shipment"
    ASSIGN_COURIER = "assign_courier"
    TRACK_SHIPMENT = "track_shipment"

    def __init__(self, session: aiohttp.ClientSession, base_url: str, api_token: str,
                 timeout_seconds: float = 15.0, pickup_location: str = "Primary"):
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._pickup_location = pickup_location

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
        }

    async def _request(self, call: str, method: str, path: str, payload: dict | None = None) -> dict:
        url = f"{self._base_url}{path}"
        try:
            async with self._session.request(method, url, json=payload, headers=self._headers(),
                                             timeout=self._timeout) as response:
                status = response.status
                body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise CourierGatewayException(call, f"{type(e).__name__}: {e}") from e

        if not 200 <= status < 300:
            raise CourierGatewayException(call, f"HTTP {status}", status=status, body=body)

        try:
            data = json.loads(body)
        except ValueError as e:
            raise CourierGatewayException(call, "response is not valid JSON", status=status, body=body) from e
        if not isinstance(data, dict):
            raise CourierGatewayException(call, "response is not a JSON object", status=status, body=body)
        return data

    def build_shipment_payload(self, order: OrderDTO) -> dict:
        address = order.shipping_address or {}
        order_date = order.created_at.strftime("%Y-%m-%d %H:%M") if order.created_at else None
        return {
            "order_id": order.id,
            "order_date": order_date,
            "pickup_location": self._pickup_location,
            "billing_customer_name": address.get("name", ""),
            "billing_last_name": "",
            "billing_address": address.get("address1", ""),
            "billing_address_2": address.get("address2", ""),
            "billing_city": address.get("city", ""),
            "billing_pincode": address.get("postal_code", ""),
            "billing_state": address.get("state", ""),
            "billing_country": address.get("country", ""),
            "billing_email": order.customer_email or "",
            "billing_phone": address.get("phone", ""),
            "shipping_is_billing": True,
            "order_items": [
                {
                    "name": item.name or item.product_id,
                    "sku": item.product_id,
                    "units": item.quantity,
                    "selling_price": item.unit_price,
                }
                for item in order.items_snapshot
            ],
            "payment_method": "Prepaid",
            "sub_total": order.total_amount,
            **DEFAULT_PACKAGE,
        }

    async def create_shipment(self, order: OrderDTO) -> ShipmentCreatedDTO:
        data = await self._request(
            self.CREATE_SHIPMENT, "POST", "/orders/create/adhoc", self.build_shipment_payload(order)
        )
        if not data.get("order_id") or not data.get("shipment_id"):
            raise CourierGatewayException(
                self.CREATE_SHIPMENT, "response lacks order_id or shipment_id", body=json.dumps(data)
            )
        logger.info(f"[Courier] Shipment {data['shipment_id']} created for order {order.id}")
        return ShipmentCreatedDTO(
            aggregator_order_id=str(data["order_id"]),
            shipment_id=str(data["shipment_id"]),
            status=data.get("status"),
        )

    async def assign_courier(self, shipment_id: str) -> CourierAssignmentDTO:
        data = await self._request(
            self.ASSIGN_COURIER, "POST", "/courier/assign/awb", {"shipment_id": shipment_id}
        )
        assignment = (data.get("response") or {}).get("data") or {}
        if data.get("awb_assign_status") != 1 or not assignment.get("awb_code"):
            raise CourierGatewayException(
                self.ASSIGN_COURIER, "courier was not assigned", body=json.dumps(data)
            )
        logger.info(f"[Courier] AWB {assignment['awb_code']} assigned to shipment {shipment_id}")
        return CourierAssignmentDTO(
            awb_code=str(assignment["awb_code"]),
            courier_name=assignment.get("courier_name"),
            status=assignment.get("status") or assignment.get("awb_code_status"),
        )

    async def track_shipment(self, awb_code: str) -> TrackingSnapshotDTO:
        data = await self._request(self.TRACK_SHIPMENT, "GET", f"/courier/track/awb/{awb_code}")
        tracking_data = data.get("tracking_data") or {}
        activities = tracking_data.get("shipment_track_activities") or []
        return TrackingSnapshotDTO(
            awb_code=awb_code,
            scans=[
                TrackingScanDTO(
                    date=activity.get("date"),
                    activity=activity.get("activity"),
                    location=activity.get("location"),
                )
                for activity in activities
                if isinstance(activity, dict)
            ],
        )
