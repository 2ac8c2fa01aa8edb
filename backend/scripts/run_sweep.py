"""
Run one pending limit order sweep outside the API server.

Usage: python scripts/run_sweep.py
"""
import asyncio
import logging

from papertrade.config import settings
from papertrade.database import init_db
from papertrade.main import build_trading_service


async def run_sweep():
    await init_db()
    service = build_trading_service()

    try:
        result = await service.check_pending_orders()
    finally:
        await service.price_service.feed.close()

    print("=" * 60)
    print("PENDING ORDER SWEEP")
    print("=" * 60)
    print(f"Checked: {result.checked}")
    print(f"Filled: {len(result.filled)}")
    for fill in result.filled:
        print(f"  [{fill.mode.value}] {fill.side.value} {fill.quantity} {fill.symbol} @ {fill.price}")
    if result.skipped:
        print(f"Deferred (insufficient funds/shares): {result.skipped}")
    if result.unpriced_symbols:
        print(f"No price available: {', '.join(result.unpriced_symbols)}")


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    asyncio.run(run_sweep())
