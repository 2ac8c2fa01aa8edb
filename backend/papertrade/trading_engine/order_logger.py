"""
Order logging utilities for trading engine

Appends executed fills to the order_history table (audit trail).
Rows are never updated or deleted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from papertrade.constants import OrderKind, OrderSide, TradingMode
from papertrade.models import Account, OrderHistory

logger = logging.getLogger(__name__)


@dataclass
class OrderLogEntry:
    """Data for a single fill history entry."""
    side: OrderSide
    symbol: str
    quantity: int
    price: Decimal
    order_kind: OrderKind
    mode: TradingMode
    pending_order_id: Optional[int] = None


def log_fill_to_history(db: AsyncSession, account: Account, entry: OrderLogEntry) -> OrderHistory:
    """
    Add a history row for an executed fill.

    Not committed here; the row is part of the caller's fill transaction,
    so a fill is never recorded without its balance/position changes.
    """
    record = OrderHistory(
        timestamp=datetime.now(timezone.utc),
        account_id=account.id,
        mode=entry.mode.value,
        side=entry.side.value,
        symbol=entry.symbol,
        quantity=entry.quantity,
        price=entry.price,
        order_type=entry.order_kind.value,
        pending_order_id=entry.pending_order_id,
    )
    db.add(record)
    return record
