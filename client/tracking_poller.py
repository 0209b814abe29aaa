"""
Tracking Poller

Drives one order tracking view:

    loading -> success                (order already has an AWB)
    loading -> polling -> success     (AWB appears while polling)
    loading | polling -> error        (any fetch failure, terminal)

While polling, the order is re-fetched every `interval_seconds` until an AWB
appears or `stop()` is called. There is no attempt cap. After `stop()`
returns no further request is issued.
"""

import asyncio
import logging
from typing import Callable

from client.api_client import StorefrontApiClient, StorefrontApiError
from enums.tracking_view_state import TrackingViewState

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 5.0
ERROR_MESSAGE = "We could not load your order. Please check your orders in your account."


def awb_code_of(order: dict) -> str | None:
    shipment = order.get("shipmentDetails") or {}
    return shipment.get("awbCode") or None


class TrackingPoller:

    def __init__(self, api_client: StorefrontApiClient, order_id: str,
                 interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
                 on_change: Callable[["TrackingPoller"], None] | None = None):
        self._api_client = api_client
        self.order_id = order_id
        self.interval_seconds = interval_seconds
        self._on_change = on_change
        self._task: asyncio.Task | None = None
        self._stopped = False

        self.state = TrackingViewState.LOADING
        self.order: dict | None = None
        self.scans: list[dict] = []
        self.error_message: str | None = None

    def _set_state(self, state: TrackingViewState) -> None:
        self.state = state
        logger.debug(f"Tracking view of order {self.order_id} is now {state.value}")
        if self._on_change is not None:
            self._on_change(self)

    def _fail(self, error: StorefrontApiError) -> None:
        # Users get the generic message, the log keeps the cause
        logger.warning(f"Tracking view of order {self.order_id} failed: {error}")
        self.error_message = ERROR_MESSAGE
        self._set_state(TrackingViewState.ERROR)

    def start(self) -> None:
        if self._stopped:
            return
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def wait(self) -> None:
        """Waits until the view reaches a terminal state or is stopped."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def stop(self) -> None:
        self._stopped = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def _run(self) -> None:
        if self._stopped:
            return
        try:
            self.order = await self._api_client.get_order(self.order_id)
        except StorefrontApiError as e:
            self._fail(e)
            return

        while awb_code_of(self.order) is None:
            if self.state != TrackingViewState.POLLING:
                self._set_state(TrackingViewState.POLLING)
            await asyncio.sleep(self.interval_seconds)
            if self._stopped:
                return
            try:
                self.order = await self._api_client.get_order(self.order_id)
            except StorefrontApiError as e:
                self._fail(e)
                return

        try:
            self.scans = await self._api_client.get_tracking(self.order_id)
        except StorefrontApiError as e:
            self._fail(e)
            return
        self._set_state(TrackingViewState.SUCCESS)
