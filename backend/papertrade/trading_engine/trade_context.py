"""
Trade context dataclasses: the parameters threaded through fill
execution, and the results handed back to callers.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from papertrade.constants import OrderKind, OrderSide, TradingMode
from papertrade.models import Account


@dataclass
class TradeContext:
    """Common parameters for fill execution."""
    db: AsyncSession
    account: Account
    mode: TradingMode
    symbol: str


@dataclass
class FillResult:
    """An executed fill (market order, or a triggered limit order)."""
    side: OrderSide
    symbol: str
    quantity: int
    price: Decimal
    order_kind: OrderKind
    mode: TradingMode
    balance_after: Decimal
    position_quantity: int  # Remaining shares in the symbol after the fill
    pending_order_id: Optional[int] = None
    executed: bool = True

    @property
    def total(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class PendingOrderResult:
    """Acknowledgement of a queued limit order (no fill yet)."""
    order_id: int
    side: OrderSide
    symbol: str
    quantity: int
    limit_price: Decimal
    mode: TradingMode
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    order_kind: OrderKind = OrderKind.LIMIT
    executed: bool = False
