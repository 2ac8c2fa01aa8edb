"""
Account Service

Account store access: lookup-or-create by account key and the
demo/live mode flag. Balances are only changed by the trading engine's
fill executors.
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from papertrade.constants import TradingMode
from papertrade.models import Account

logger = logging.getLogger(__name__)


async def get_account(db: AsyncSession, account_key: str) -> Optional[Account]:
    result = await db.execute(select(Account).where(Account.account_key == account_key))
    return result.scalar_one_or_none()


async def get_or_create_account(db: AsyncSession, account_key: str, initial_balance: Decimal) -> Account:
    """
    Return the account for account_key, creating it with initial_balance
    in both modes (live mode selected) on first reference.

    Flushes but does not commit; the caller owns the transaction.
    """
    account = await get_account(db, account_key)
    if account:
        return account

    account = Account(
        account_key=account_key,
        is_demo_mode=False,
        demo_balance=initial_balance,
        live_balance=initial_balance,
    )
    db.add(account)
    await db.flush()  # Assigns account.id

    logger.info(f"Created paper account '{account_key}' with {initial_balance} per mode")
    return account


def set_mode(account: Account, demo: bool) -> TradingMode:
    """Flip the mode flag; balances and positions of both modes are untouched"""
    previous = account.mode
    account.is_demo_mode = demo
    if previous != account.mode:
        logger.info(f"Account '{account.account_key}' switched from {previous.value} to {account.mode.value} mode")
    return account.mode
