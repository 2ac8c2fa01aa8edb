"""
Trading Service

Order and position accounting engine for paper trading.

Responsibilities:
- Balance, position, pending order and history queries for the active mode
- Market and limit order placement with validation in a fixed order:
  quantity, limit price, shares on hand (sells), market hours (live market orders)
- Cancellation of pending limit orders
- Pending order sweep: fills triggered limit orders at their limit price
- Demo/live mode switching

Every mutation runs in one database session and commits once, so a fill's
balance change, position change and history row land together. A per-account
asyncio.Lock owned by the service serialises read-modify-write on an account.
Price fetches happen outside the lock.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import AsyncIterator, Callable, Dict, List, Optional, Tuple, Union

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from papertrade.cache import utc_now
from papertrade.constants import CENT, OrderKind, OrderSide, TradingMode, normalize_symbol
from papertrade.exceptions import (
    InsufficientFundsError,
    InsufficientSharesError,
    InvalidLimitPriceError,
    InvalidQuantityError,
    MarketClosedError,
    OrderNotFoundError,
    PriceUnavailableError,
    ValidationError,
)
from papertrade.models import Account, OrderHistory, PendingOrder, Position
from papertrade.services.account_service import get_or_create_account, set_mode
from papertrade.services.market_calendar import MarketCalendar
from papertrade.services.price_service import PriceService
from papertrade.trading_engine.buy_executor import execute_buy
from papertrade.trading_engine.position_manager import list_positions
from papertrade.trading_engine.sell_executor import check_shares, execute_sell
from papertrade.trading_engine.trade_context import FillResult, PendingOrderResult, TradeContext

logger = logging.getLogger(__name__)

OrderResult = Union[FillResult, PendingOrderResult]


@dataclass
class SweepResult:
    """Outcome of one pending order sweep"""
    checked: int = 0
    filled: List[FillResult] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)  # Triggered but not fillable this pass
    unpriced_symbols: List[str] = field(default_factory=list)


def is_limit_triggered(side: OrderSide, current_price: Decimal, limit_price: Decimal) -> bool:
    """Buys trigger at or below the limit, sells at or above it"""
    if side == OrderSide.BUY:
        return current_price <= limit_price
    return current_price >= limit_price


def _validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantityError(quantity)
    return quantity


def _validate_limit_price(limit_price) -> Decimal:
    if limit_price is None or isinstance(limit_price, bool):
        raise InvalidLimitPriceError(limit_price)
    try:
        price = Decimal(str(limit_price))
    except (InvalidOperation, ValueError):
        raise InvalidLimitPriceError(limit_price)
    if not price.is_finite() or price <= 0:
        raise InvalidLimitPriceError(limit_price)
    # Stored as whole cents; anything finer would be rounded after acknowledgement
    try:
        in_cents = price.quantize(CENT)
    except InvalidOperation:
        raise InvalidLimitPriceError(limit_price)
    if in_cents != price:
        raise InvalidLimitPriceError(limit_price, f"Limit price must be in whole cents (got {limit_price})")
    return in_cents


def _pending_result(order: PendingOrder) -> PendingOrderResult:
    return PendingOrderResult(
        order_id=order.id,
        side=OrderSide(order.side),
        symbol=order.symbol,
        quantity=order.quantity,
        limit_price=Decimal(order.limit_price),
        mode=TradingMode(order.mode),
        created_at=order.created_at,
    )


class TradingService:
    """Paper trading engine for one database and one price service"""

    def __init__(
        self,
        session_maker: async_sessionmaker,
        price_service: PriceService,
        calendar: MarketCalendar,
        initial_balance: Decimal = Decimal("100000.00"),
        default_account_key: str = "global",
        clock: Callable[[], datetime] = utc_now,
    ):
        self._session_maker = session_maker
        self.price_service = price_service
        self.calendar = calendar
        self.initial_balance = Decimal(initial_balance).quantize(CENT)
        self.default_account_key = default_account_key
        self._clock = clock
        self._account_locks: Dict[str, asyncio.Lock] = {}

    # ------------------------------------------------------------------
    # Session / locking helpers
    # ------------------------------------------------------------------

    def resolve_account_key(self, account_key: Optional[str]) -> str:
        key = (account_key or "").strip()
        return key or self.default_account_key

    def _lock_for(self, account_key: str) -> asyncio.Lock:
        if account_key not in self._account_locks:
            self._account_locks[account_key] = asyncio.Lock()
        return self._account_locks[account_key]

    @asynccontextmanager
    async def _account_session(self, account_key: str) -> AsyncIterator[Tuple[AsyncSession, Account]]:
        """
        Lock the account, open a session and load (or create) the account.
        Commits on clean exit; any exception rolls the whole unit back.
        """
        async with self._lock_for(account_key):
            async with self._session_maker() as db:
                try:
                    account = await get_or_create_account(db, account_key, self.initial_balance)
                    yield db, account
                    await db.commit()
                except BaseException:
                    await db.rollback()
                    raise

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_balance(self, account_key: Optional[str] = None) -> Decimal:
        """Cash balance in the account's active mode"""
        async with self._account_session(self.resolve_account_key(account_key)) as (db, account):
            return account.get_balance(account.mode)

    async def get_positions(self, account_key: Optional[str] = None) -> List[Position]:
        async with self._account_session(self.resolve_account_key(account_key)) as (db, account):
            return await list_positions(db, account.id, account.mode)

    async def get_pending_orders(self, account_key: Optional[str] = None) -> List[PendingOrder]:
        """Pending limit orders in the active mode, oldest first"""
        async with self._account_session(self.resolve_account_key(account_key)) as (db, account):
            result = await db.execute(
                select(PendingOrder)
                .where(PendingOrder.account_id == account.id, PendingOrder.mode == account.mode.value)
                .order_by(PendingOrder.created_at, PendingOrder.id)
            )
            return list(result.scalars().all())

    async def get_order_history(self, account_key: Optional[str] = None, limit: int = 50) -> List[OrderHistory]:
        """Executed fills in the active mode, newest first"""
        async with self._account_session(self.resolve_account_key(account_key)) as (db, account):
            result = await db.execute(
                select(OrderHistory)
                .where(OrderHistory.account_id == account.id, OrderHistory.mode == account.mode.value)
                .order_by(desc(OrderHistory.timestamp), desc(OrderHistory.id))
                .limit(limit)
            )
            return list(result.scalars().all())

    async def get_pnl(self, account_key: Optional[str] = None) -> Decimal:
        """
        Unrealised P&L of open positions in the active mode:
        sum of quantity * (current price - average cost).

        Raises:
            PriceUnavailableError: a live price could not be fetched
        """
        key = self.resolve_account_key(account_key)
        async with self._account_session(key) as (db, account):
            mode = account.mode
            holdings = [(p.symbol, p.quantity, Decimal(p.average_cost)) for p in await list_positions(db, account.id, mode)]

        total = Decimal("0")
        for symbol, quantity, average_cost in holdings:
            current_price = await self.price_service.get_price(symbol, demo=mode == TradingMode.DEMO)
            total += quantity * (current_price - average_cost)
        return total.quantize(CENT)

    # ------------------------------------------------------------------
    # Mode / market state
    # ------------------------------------------------------------------

    async def set_demo_mode(self, demo: bool, account_key: Optional[str] = None) -> TradingMode:
        async with self._account_session(self.resolve_account_key(account_key)) as (db, account):
            return set_mode(account, demo)

    async def is_demo_mode(self, account_key: Optional[str] = None) -> bool:
        async with self._account_session(self.resolve_account_key(account_key)) as (db, account):
            return account.mode == TradingMode.DEMO

    def is_market_open(self, now: Optional[datetime] = None) -> bool:
        return self.calendar.is_market_open(now or self._clock())

    def get_market_status(self) -> dict:
        now = self._clock()
        return {
            "is_open": self.calendar.is_market_open(now),
            "exchange_time": self.calendar.to_exchange_time(now),
            "next_open": self.calendar.next_market_open(now),
        }

    async def reset_account(self, account_key: Optional[str] = None) -> Decimal:
        """
        Restore the active-mode balance to the initial amount and drop that
        mode's positions and pending orders. Order history is kept.
        """
        async with self._account_session(self.resolve_account_key(account_key)) as (db, account):
            mode = account.mode
            await db.execute(delete(Position).where(Position.account_id == account.id, Position.mode == mode.value))
            await db.execute(
                delete(PendingOrder).where(PendingOrder.account_id == account.id, PendingOrder.mode == mode.value)
            )
            account.set_balance(mode, self.initial_balance)
            logger.info(f"Reset {mode.value} partition of account '{account.account_key}' to {self.initial_balance}")
            return self.initial_balance

    # ------------------------------------------------------------------
    # Order placement
    # ------------------------------------------------------------------

    async def place_buy_order(
        self,
        symbol: str,
        quantity: int,
        order_kind: OrderKind = OrderKind.MARKET,
        limit_price=None,
        account_key: Optional[str] = None,
    ) -> OrderResult:
        return await self.place_order(OrderSide.BUY, symbol, quantity, order_kind, limit_price, account_key)

    async def place_sell_order(
        self,
        symbol: str,
        quantity: int,
        order_kind: OrderKind = OrderKind.MARKET,
        limit_price=None,
        account_key: Optional[str] = None,
    ) -> OrderResult:
        return await self.place_order(OrderSide.SELL, symbol, quantity, order_kind, limit_price, account_key)

    async def place_order(
        self,
        side: OrderSide,
        symbol: str,
        quantity: int,
        order_kind: OrderKind = OrderKind.MARKET,
        limit_price=None,
        account_key: Optional[str] = None,
    ) -> OrderResult:
        """
        Place a market or limit order.

        Market orders fill immediately at the fetched price. Limit orders are
        queued; no cash is reserved and funds are re-checked at fill time.

        Raises:
            InvalidQuantityError, InvalidLimitPriceError, InsufficientSharesError,
            MarketClosedError, PriceUnavailableError, InsufficientFundsError
        """
        side = OrderSide(side)
        order_kind = OrderKind(order_kind)
        symbol = normalize_symbol(symbol)
        if not symbol:
            raise ValidationError("Symbol is required")

        quantity = _validate_quantity(quantity)
        if order_kind == OrderKind.LIMIT:
            limit = _validate_limit_price(limit_price)

        key = self.resolve_account_key(account_key)

        # Phase 1: preconditions (and the whole job for limit orders)
        async with self._account_session(key) as (db, account):
            mode = account.mode
            ctx = TradeContext(db=db, account=account, mode=mode, symbol=symbol)

            if side == OrderSide.SELL:
                await check_shares(ctx, quantity)

            if order_kind == OrderKind.LIMIT:
                order = PendingOrder(
                    account_id=account.id,
                    mode=mode.value,
                    side=side.value,
                    symbol=symbol,
                    quantity=quantity,
                    limit_price=limit,
                    created_at=self._clock(),
                )
                db.add(order)
                await db.flush()
                logger.info(
                    f"[{mode.value}] Limit {side.value} queued: {quantity} {symbol} @ {limit} "
                    f"(order {order.id}, account '{key}')"
                )
                return _pending_result(order)

            if mode == TradingMode.LIVE and not self.calendar.is_market_open(self._clock()):
                raise MarketClosedError()

        # Phase 2: price outside the lock, then fill
        price = await self.price_service.get_price(symbol, demo=mode == TradingMode.DEMO)

        async with self._account_session(key) as (db, account):
            ctx = TradeContext(db=db, account=account, mode=mode, symbol=symbol)
            if side == OrderSide.BUY:
                return await execute_buy(ctx, quantity, price, OrderKind.MARKET)
            return await execute_sell(ctx, quantity, price, OrderKind.MARKET)

    async def cancel_order(self, order_id: int, account_key: Optional[str] = None) -> PendingOrderResult:
        """
        Cancel a pending order in the active mode and return its original terms.

        Raises:
            OrderNotFoundError: unknown, already filled/cancelled, or other account/mode
        """
        async with self._account_session(self.resolve_account_key(account_key)) as (db, account):
            result = await db.execute(
                select(PendingOrder).where(
                    PendingOrder.id == order_id,
                    PendingOrder.account_id == account.id,
                    PendingOrder.mode == account.mode.value,
                )
            )
            order = result.scalar_one_or_none()
            if order is None:
                raise OrderNotFoundError(order_id)

            cancelled = _pending_result(order)
            await db.delete(order)
            logger.info(
                f"[{cancelled.mode.value}] Cancelled limit {cancelled.side.value} order {order_id}: "
                f"{cancelled.quantity} {cancelled.symbol} @ {cancelled.limit_price}"
            )
            return cancelled

    # ------------------------------------------------------------------
    # Pending order sweep
    # ------------------------------------------------------------------

    async def check_pending_orders(self) -> SweepResult:
        """
        Fill every pending limit order whose trigger condition holds at the
        current price. One price per (mode, symbol) per sweep. Triggered
        orders lacking funds or shares stay pending for the next sweep.
        """
        sweep = SweepResult()

        async with self._session_maker() as db:
            result = await db.execute(
                select(PendingOrder, Account.account_key)
                .join(Account, PendingOrder.account_id == Account.id)
                .order_by(PendingOrder.created_at, PendingOrder.id)
            )
            rows = [
                (order.id, account_key, order.mode, OrderSide(order.side), order.symbol, Decimal(order.limit_price))
                for order, account_key in result.all()
            ]

        groups: Dict[Tuple[str, str], list] = {}
        for row in rows:
            groups.setdefault((row[2], row[4]), []).append(row)

        for (mode, symbol), orders in groups.items():
            sweep.checked += len(orders)
            try:
                current_price = await self.price_service.get_price(symbol, demo=mode == TradingMode.DEMO.value)
            except PriceUnavailableError as e:
                logger.warning(f"Skipping {len(orders)} pending {mode} order(s) for {symbol}: {e.message}")
                sweep.unpriced_symbols.append(symbol)
                continue

            for order_id, account_key, _, side, _, limit_price in orders:
                if not is_limit_triggered(side, current_price, limit_price):
                    continue

                fill = await self._fill_pending_order(order_id, account_key)
                if fill:
                    sweep.filled.append(fill)
                else:
                    sweep.skipped.append(order_id)

        if sweep.checked:
            logger.info(
                f"Pending order sweep: {sweep.checked} checked, {len(sweep.filled)} filled, "
                f"{len(sweep.skipped)} deferred, {len(sweep.unpriced_symbols)} symbol(s) unpriced"
            )
        return sweep

    async def _fill_pending_order(self, order_id: int, account_key: str) -> Optional[FillResult]:
        """
        Fill one triggered order at its limit price and delete it.
        Returns None when the order is gone or cannot be funded/covered yet.
        """
        async with self._account_session(account_key) as (db, account):
            order = await db.get(PendingOrder, order_id)
            if order is None:
                return None  # Cancelled since the sweep started

            mode = TradingMode(order.mode)
            side = OrderSide(order.side)
            ctx = TradeContext(db=db, account=account, mode=mode, symbol=order.symbol)
            try:
                if side == OrderSide.BUY:
                    fill = await execute_buy(ctx, order.quantity, Decimal(order.limit_price), OrderKind.LIMIT, order.id)
                else:
                    fill = await execute_sell(ctx, order.quantity, Decimal(order.limit_price), OrderKind.LIMIT, order.id)
            except (InsufficientFundsError, InsufficientSharesError) as e:
                logger.warning(f"[{mode.value}] Limit order {order_id} triggered but deferred: {e.message}")
                return None

            await db.delete(order)
            return fill
