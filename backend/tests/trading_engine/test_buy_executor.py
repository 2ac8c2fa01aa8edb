"""Tests for papertrade/trading_engine/buy_executor.py"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from papertrade.constants import OrderKind, OrderSide, TradingMode
from papertrade.exceptions import InsufficientFundsError
from papertrade.models import Account, OrderHistory
from papertrade.trading_engine.buy_executor import can_afford, execute_buy, fill_cost
from papertrade.trading_engine.position_manager import get_position
from papertrade.trading_engine.trade_context import TradeContext


async def _ctx(db, balance="100000.00", mode=TradingMode.LIVE, symbol="AAPL"):
    account = Account(
        account_key="acct",
        is_demo_mode=mode == TradingMode.DEMO,
        demo_balance=Decimal(balance),
        live_balance=Decimal(balance),
    )
    db.add(account)
    await db.flush()
    return TradeContext(db=db, account=account, mode=mode, symbol=symbol)


class TestCanAfford:
    @pytest.mark.asyncio
    async def test_exact_balance_is_affordable(self, db_session):
        ctx = await _ctx(db_session, balance="1000.00")
        assert can_afford(ctx, 10, Decimal("100")) is True
        assert can_afford(ctx, 10, Decimal("100.01")) is False

    def test_fill_cost_in_cents(self):
        assert fill_cost(3, Decimal("0.125")) == Decimal("0.38")


class TestExecuteBuy:
    @pytest.mark.asyncio
    async def test_market_buy(self, db_session):
        """Happy path: 10 AAPL @ 100 from 100000 leaves 99000."""
        ctx = await _ctx(db_session)

        fill = await execute_buy(ctx, 10, Decimal("100"), OrderKind.MARKET)

        assert fill.executed is True
        assert fill.side == OrderSide.BUY
        assert fill.balance_after == Decimal("99000.00")
        assert fill.position_quantity == 10
        assert fill.total == Decimal("1000")
        assert ctx.account.live_balance == Decimal("99000.00")
        # Other mode untouched
        assert ctx.account.demo_balance == Decimal("100000.00")

        position = await get_position(db_session, ctx.account.id, TradingMode.LIVE, "AAPL")
        assert position.quantity == 10
        assert Decimal(position.average_cost) == Decimal("100")

    @pytest.mark.asyncio
    async def test_records_history_row(self, db_session):
        ctx = await _ctx(db_session, mode=TradingMode.DEMO)

        await execute_buy(ctx, 5, Decimal("50"), OrderKind.LIMIT, pending_order_id=7)
        await db_session.flush()

        rows = (await db_session.execute(select(OrderHistory))).scalars().all()
        assert len(rows) == 1
        assert rows[0].side == "BUY"
        assert rows[0].order_type == "LIMIT"
        assert rows[0].mode == "demo"
        assert rows[0].quantity == 5
        assert Decimal(rows[0].price) == Decimal("50")
        assert rows[0].pending_order_id == 7

    @pytest.mark.asyncio
    async def test_spending_entire_balance(self, db_session):
        """Edge case: cost equal to the balance is allowed and leaves zero."""
        ctx = await _ctx(db_session, balance="500.00")

        fill = await execute_buy(ctx, 5, Decimal("100"), OrderKind.MARKET)

        assert fill.balance_after == Decimal("0")

    @pytest.mark.asyncio
    async def test_insufficient_funds_changes_nothing(self, db_session):
        """Failure: no balance, position or history change."""
        ctx = await _ctx(db_session, balance="999.99")

        with pytest.raises(InsufficientFundsError) as exc_info:
            await execute_buy(ctx, 10, Decimal("100"), OrderKind.MARKET)

        assert exc_info.value.required == Decimal("1000.00")
        assert exc_info.value.available == Decimal("999.99")
        assert ctx.account.live_balance == Decimal("999.99")
        assert await get_position(db_session, ctx.account.id, TradingMode.LIVE, "AAPL") is None
        assert (await db_session.execute(select(OrderHistory))).scalars().all() == []
