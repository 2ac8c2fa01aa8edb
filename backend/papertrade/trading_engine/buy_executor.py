"""
Buy order execution for trading engine

Handles a buy fill at a known price:
- Checking cash in the active mode covers price * quantity
- Debiting the balance
- Upserting the position with the new weighted-average cost
- Recording the fill in order history
"""

import logging
from decimal import Decimal
from typing import Optional

from papertrade.constants import CENT, OrderKind, OrderSide
from papertrade.exceptions import InsufficientFundsError
from papertrade.trading_engine.order_logger import OrderLogEntry, log_fill_to_history
from papertrade.trading_engine.position_manager import add_to_position
from papertrade.trading_engine.trade_context import FillResult, TradeContext

logger = logging.getLogger(__name__)


def fill_cost(quantity: int, price: Decimal) -> Decimal:
    return (Decimal(price) * quantity).quantize(CENT)


def can_afford(ctx: TradeContext, quantity: int, price: Decimal) -> bool:
    return fill_cost(quantity, price) <= ctx.account.get_balance(ctx.mode)


async def execute_buy(
    ctx: TradeContext,
    quantity: int,
    price: Decimal,
    order_kind: OrderKind,
    pending_order_id: Optional[int] = None,
) -> FillResult:
    """
    Execute a buy fill. Nothing is committed; the caller commits the
    balance, position and history changes as one transaction.

    Raises:
        InsufficientFundsError: cost exceeds the active-mode balance
    """
    price = Decimal(price)
    total_cost = fill_cost(quantity, price)
    balance = ctx.account.get_balance(ctx.mode)

    if not can_afford(ctx, quantity, price):
        raise InsufficientFundsError(required=total_cost, available=balance)

    new_balance = balance - total_cost
    ctx.account.set_balance(ctx.mode, new_balance)

    position = await add_to_position(ctx.db, ctx.account.id, ctx.mode, ctx.symbol, quantity, price)

    log_fill_to_history(
        ctx.db,
        ctx.account,
        OrderLogEntry(
            side=OrderSide.BUY,
            symbol=ctx.symbol,
            quantity=quantity,
            price=price,
            order_kind=order_kind,
            mode=ctx.mode,
            pending_order_id=pending_order_id,
        ),
    )

    logger.info(
        f"[{ctx.mode.value}] {order_kind.value} BUY {quantity} {ctx.symbol} @ {price} "
        f"(cost {total_cost}, balance {new_balance}, avg cost {position.average_cost})"
    )

    return FillResult(
        side=OrderSide.BUY,
        symbol=ctx.symbol,
        quantity=quantity,
        price=price,
        order_kind=order_kind,
        mode=ctx.mode,
        balance_after=new_balance,
        position_quantity=position.quantity,
        pending_order_id=pending_order_id,
    )
