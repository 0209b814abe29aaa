"""
Async client for the storefront API as used by the order tracking page.
"""

import asyncio
import logging

import aiohttp

logger = logging.getLogger(__name__)


class StorefrontApiError(Exception):
    """Raised when a storefront API request fails for any reason."""

    def __init__(self, path: str, reason: str, status: int | None = None):
        super().__init__(f"GET {path} failed: {reason}")
        self.path = path
        self.reason = reason
        self.status = status


class StorefrontApiClient:

    def __init__(self, session: aiohttp.ClientSession, base_url: str, session_token: str,
                 timeout_seconds: float = 10.0):
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._session_token = session_token
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def _get(self, path: str) -> dict:
        headers = {"Authorization": f"Bearer {self._session_token}"}
        try:
            async with self._session.get(f"{self._base_url}{path}", headers=headers,
                                         timeout=self._timeout) as response:
                if response.status != 200:
                    raise StorefrontApiError(path, f"HTTP {response.status}", status=response.status)
                return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise StorefrontApiError(path, f"{type(e).__name__}: {e}") from e

    async def get_order(self, order_id: str) -> dict:
        return await self._get(f"/orders/{order_id}")

    async def get_tracking(self, order_id: str) -> list[dict]:
        data = await self._get(f"/shipping/track/{order_id}")
        return (data.get("tracking_data") or {}).get("scans") or []
