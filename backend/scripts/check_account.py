"""
Print balances, positions and pending orders for a paper account.

Usage: python scripts/check_account.py [account_key]
"""
import asyncio
import sys

from sqlalchemy import select

from papertrade.config import settings
from papertrade.database import async_session_maker, init_db
from papertrade.models import Account, PendingOrder, Position


async def check_account(account_key: str):
    await init_db()

    async with async_session_maker() as db:
        result = await db.execute(select(Account).where(Account.account_key == account_key))
        account = result.scalar_one_or_none()
        if not account:
            print(f"No account '{account_key}'")
            return

        print("=" * 60)
        print(f"ACCOUNT {account.account_key} (active mode: {account.mode.value})")
        print("=" * 60)
        print(f"Live balance: {account.live_balance}")
        print(f"Demo balance: {account.demo_balance}")

        positions = await db.execute(
            select(Position).where(Position.account_id == account.id).order_by(Position.mode, Position.symbol)
        )
        print("\nPositions:")
        for p in positions.scalars().all():
            print(f"  [{p.mode}] {p.symbol}: {p.quantity} @ {p.average_cost}")

        orders = await db.execute(
            select(PendingOrder).where(PendingOrder.account_id == account.id).order_by(PendingOrder.created_at)
        )
        print("\nPending orders:")
        for o in orders.scalars().all():
            print(f"  #{o.id} [{o.mode}] {o.side} {o.quantity} {o.symbol} @ {o.limit_price} (since {o.created_at})")


if __name__ == "__main__":
    key = sys.argv[1] if len(sys.argv) > 1 else settings.default_account_key
    asyncio.run(check_account(key))
