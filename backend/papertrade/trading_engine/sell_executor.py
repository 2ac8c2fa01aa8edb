"""
Sell order execution for trading engine

Handles a sell fill at a known price:
- Checking the position holds enough shares (no short selling)
- Crediting the proceeds
- Reducing the position, deleting it when it reaches zero
- Recording the fill in order history
"""

import logging
from decimal import Decimal
from typing import Optional

from papertrade.constants import CENT, OrderKind, OrderSide
from papertrade.exceptions import InsufficientSharesError
from papertrade.trading_engine.order_logger import OrderLogEntry, log_fill_to_history
from papertrade.trading_engine.position_manager import get_position, held_quantity, reduce_position
from papertrade.trading_engine.trade_context import FillResult, TradeContext

logger = logging.getLogger(__name__)


async def check_shares(ctx: TradeContext, quantity: int):
    """Raise InsufficientSharesError unless quantity shares are held in the active mode"""
    position = await get_position(ctx.db, ctx.account.id, ctx.mode, ctx.symbol)
    available = held_quantity(position)
    if available < quantity:
        raise InsufficientSharesError(ctx.symbol, requested=quantity, available=available)
    return position


async def execute_sell(
    ctx: TradeContext,
    quantity: int,
    price: Decimal,
    order_kind: OrderKind,
    pending_order_id: Optional[int] = None,
) -> FillResult:
    """
    Execute a sell fill. Nothing is committed; the caller commits.

    Raises:
        InsufficientSharesError: position missing or smaller than quantity
    """
    price = Decimal(price)
    position = await check_shares(ctx, quantity)

    proceeds = (price * quantity).quantize(CENT)
    new_balance = ctx.account.get_balance(ctx.mode) + proceeds
    ctx.account.set_balance(ctx.mode, new_balance)

    remaining = await reduce_position(ctx.db, position, quantity)

    log_fill_to_history(
        ctx.db,
        ctx.account,
        OrderLogEntry(
            side=OrderSide.SELL,
            symbol=ctx.symbol,
            quantity=quantity,
            price=price,
            order_kind=order_kind,
            mode=ctx.mode,
            pending_order_id=pending_order_id,
        ),
    )

    logger.info(
        f"[{ctx.mode.value}] {order_kind.value} SELL {quantity} {ctx.symbol} @ {price} "
        f"(proceeds {proceeds}, balance {new_balance}, {remaining} shares left)"
    )

    return FillResult(
        side=OrderSide.SELL,
        symbol=ctx.symbol,
        quantity=quantity,
        price=price,
        order_kind=order_kind,
        mode=ctx.mode,
        balance_after=new_balance,
        position_quantity=remaining,
        pending_order_id=pending_order_id,
    )
