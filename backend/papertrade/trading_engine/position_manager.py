"""
Position management utilities for trading engine

Handles position CRUD for one (account, mode, symbol):
- Looking up and listing positions
- Weighted-average cost on buys
- Reducing and closing on sells
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from papertrade.constants import COST_PRECISION, TradingMode
from papertrade.models import Position


def calculate_average_cost(old_quantity: int, old_average: Decimal, quantity: int, price: Decimal) -> Decimal:
    """
    Weighted average cost after buying quantity at price.

    (old_qty * old_avg + qty * price) / (old_qty + qty), or just price
    when there is no prior position.
    """
    new_quantity = old_quantity + quantity
    if old_quantity <= 0:
        return Decimal(price).quantize(COST_PRECISION)
    total_cost = Decimal(old_average) * old_quantity + Decimal(price) * quantity
    return (total_cost / new_quantity).quantize(COST_PRECISION)


async def get_position(db: AsyncSession, account_id: int, mode: TradingMode, symbol: str) -> Optional[Position]:
    query = select(Position).where(
        Position.account_id == account_id,
        Position.mode == mode.value,
        Position.symbol == symbol,
    )
    result = await db.execute(query)
    return result.scalars().first()


async def list_positions(db: AsyncSession, account_id: int, mode: TradingMode) -> List[Position]:
    query = (
        select(Position)
        .where(Position.account_id == account_id, Position.mode == mode.value)
        .order_by(Position.symbol)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


def held_quantity(position: Optional[Position]) -> int:
    return position.quantity if position else 0


async def add_to_position(
    db: AsyncSession,
    account_id: int,
    mode: TradingMode,
    symbol: str,
    quantity: int,
    price: Decimal,
) -> Position:
    """Create the position on first buy, otherwise re-average it"""
    position = await get_position(db, account_id, mode, symbol)

    if position is None:
        position = Position(
            account_id=account_id,
            mode=mode.value,
            symbol=symbol,
            quantity=quantity,
            average_cost=calculate_average_cost(0, Decimal("0"), quantity, price),
        )
        db.add(position)
    else:
        position.average_cost = calculate_average_cost(position.quantity, position.average_cost, quantity, price)
        position.quantity = position.quantity + quantity

    # Don't commit here - caller commits balance, position and history together
    await db.flush()
    return position


async def reduce_position(db: AsyncSession, position: Position, quantity: int) -> int:
    """
    Remove quantity shares; average cost is unchanged by sells.

    Deletes the row when nothing remains. Returns the remaining quantity.
    """
    if quantity > position.quantity:
        raise ValueError(f"Cannot reduce {position.symbol} by {quantity}, only {position.quantity} held")

    remaining = position.quantity - quantity
    if remaining == 0:
        await db.delete(position)
    else:
        position.quantity = remaining

    await db.flush()
    return remaining
