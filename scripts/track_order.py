#!/usr/bin/env python3
"""
Command-line order tracker.

Follows one order the way the storefront tracking page does: waits for the
courier AWB, then prints the shipment scans most recent first.

Usage:
    python scripts/track_order.py <order_id> --token <session-token> [--base-url http://localhost:10000]
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

import aiohttp

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from client.api_client import StorefrontApiClient
from client.tracking_poller import TrackingPoller, awb_code_of
from enums.tracking_view_state import TrackingViewState
from models.tracking import TrackingSnapshotDTO


def render(poller: TrackingPoller) -> None:
    if poller.state == TrackingViewState.LOADING:
        print(f"Loading order {poller.order_id}...")
    elif poller.state == TrackingViewState.POLLING:
        print(f"Order {poller.order_id} is being prepared, waiting for the courier "
              f"(checking every {poller.interval_seconds:g}s)...")
    elif poller.state == TrackingViewState.ERROR:
        print(poller.error_message)
    elif poller.state == TrackingViewState.SUCCESS:
        snapshot = TrackingSnapshotDTO(awb_code=awb_code_of(poller.order), scans=poller.scans)
        print(f"AWB: {snapshot.awb_code}")
        if snapshot.last_scan is None:
            print("No scans yet.")
            return
        print(f"Latest: {snapshot.last_scan.activity or '-'}")
        for scan in snapshot.most_recent_first():
            print(f"  {scan.date or '-':<20} {scan.activity or '-'} ({scan.location or '-'})")


async def track(order_id: str, base_url: str, token: str, interval: float) -> int:
    async with aiohttp.ClientSession() as session:
        api_client = StorefrontApiClient(session, base_url, token)
        poller = TrackingPoller(api_client, order_id, interval_seconds=interval, on_change=render)
        render(poller)
        poller.start()
        try:
            await poller.wait()
        finally:
            await poller.stop()
    return 0 if poller.state == TrackingViewState.SUCCESS else 1


def main():
    parser = argparse.ArgumentParser(description="Track a storefront order until it ships")
    parser.add_argument("order_id")
    parser.add_argument("--token", default=os.environ.get("STOREFRONT_SESSION_TOKEN"), help="session token")
    parser.add_argument("--base-url", default=os.environ.get("STOREFRONT_BASE_URL", "http://localhost:10000"))
    parser.add_argument("--interval", type=float,
                        default=float(os.environ.get("TRACKING_POLL_INTERVAL_SECONDS", "5")))
    args = parser.parse_args()

    if not args.token:
        parser.error("a session token is required (--token or STOREFRONT_SESSION_TOKEN)")

    try:
        sys.exit(asyncio.run(track(args.order_id, args.base_url, args.token, args.interval)))
    except KeyboardInterrupt:
        print("\nStopped.")
        sys.exit(130)


if __name__ == "__main__":
    main()
