#!/usr/bin/env python3
"""Manually run one pricing cycle and display the results.

Run from backend directory:
    python scripts/run_pricing_cycle.py
"""

import asyncio
import sys

sys.path.insert(0, ".")

from app.bullion_tracker.infrastructure.tasks.price_tasks import _run_pricing_cycle_async


async def main() -> None:
    print("\n" + "=" * 60)
    print("Bullion Tracker - Manual Pricing Cycle")
    print("=" * 60 + "\n")

    print("Resolving spot prices and checking alerts...")
    result = await _run_pricing_cycle_async()

    print("\n" + "-" * 60)
    print("Prices:")
    for metal, price in result["prices"].items():
        print(f"  {metal:<10} ${price['price']:>10}  ({price['provenance']}: {price['source']})")

    print(f"\n  All live: {result['all_live']}")
    print(f"  History rows written: {result['history_written']}")
    print(f"  Alerts checked: {result['alerts_checked']}")
    print(f"  Alerts triggered: {result['alerts_triggered']}")
    print(f"  Notifications sent: {result['notifications_sent']}")
    print(f"  Timestamp: {result['timestamp']}")
    print("=" * 60 + "\n")


if __name__ == "__main__":
    asyncio.run(main())
