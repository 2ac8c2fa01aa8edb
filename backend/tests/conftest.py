"""
Shared test fixtures for the papertrade backend tests.

Provides reusable fixtures for:
- Async database sessions (in-memory SQLite)
- A controllable clock and a stub random source
- A scripted price feed (no network)
- A fully wired TradingService
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from unittest.mock import AsyncMock
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from papertrade.cache import PriceCache
from papertrade.price_feeds.base import PriceFeed, PriceFeedError, PriceQuote
from papertrade.price_feeds.demo_feed import DemoPriceSimulator
from papertrade.services.market_calendar import MarketCalendar
from papertrade.services.price_service import PriceService
from papertrade.services.trading_service import TradingService

# Monday 2024-01-08 10:00 America/New_York (EST, UTC-5)
MARKET_OPEN_UTC = datetime(2024, 1, 8, 15, 0, tzinfo=timezone.utc)
# Monday 2024-01-08 17:00 America/New_York
MARKET_CLOSED_UTC = datetime(2024, 1, 8, 22, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FixedClock:
    """Callable clock whose time only moves when a test advances it."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class StubRandom:
    """Stands in for random.Random; uniform() always returns the same value."""

    def __init__(self, value: float = 0.0):
        self.value = value
        self.calls = []

    def uniform(self, a, b):
        self.calls.append((a, b))
        return self.value


class ScriptedPriceFeed(PriceFeed):
    """
    PriceFeed returning prices from a dict. Symbols without a price
    raise PriceFeedError. Every call is recorded.
    """

    def __init__(self, prices=None):
        super().__init__(name="scripted")
        self.prices = {k: Decimal(str(v)) for k, v in (prices or {}).items()}
        self.calls = []

    def set_price(self, symbol, price):
        self.prices[symbol] = Decimal(str(price))

    async def get_quote(self, symbol: str) -> PriceQuote:
        self.calls.append(symbol)
        if symbol not in self.prices:
            raise PriceFeedError(f"no price for {symbol}")
        return PriceQuote(symbol=symbol, price=self.prices[symbol], timestamp=datetime.now(timezone.utc))


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def async_engine():
    """Create an in-memory async SQLite engine for testing."""
    from papertrade.models import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_maker(async_engine):
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_maker):
    """Provide a transactional async database session for tests.

    Each test gets its own session that rolls back after the test.
    """
    async with session_maker() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------------------------
# Engine collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def clock():
    return FixedClock(MARKET_OPEN_UTC)


@pytest.fixture
def stub_rng():
    """Demo prices stay exactly at their baseline."""
    return StubRandom(0.0)


@pytest.fixture
def price_feed():
    return ScriptedPriceFeed({"AAPL": "100", "MSFT": "50", "TSLA": "200"})


@pytest.fixture
def fake_sleep():
    return AsyncMock()


@pytest.fixture
def price_service(price_feed, clock, stub_rng, fake_sleep):
    return PriceService(
        feed=price_feed,
        cache=PriceCache(ttl_seconds=60, clock=clock),
        demo_prices=DemoPriceSimulator(base_price=Decimal("100.00"), volatility=0.10, rng=stub_rng),
        max_attempts=3,
        backoff_base=2.0,
        timeout_seconds=None,
        sleep=fake_sleep,
    )


@pytest.fixture
def trading_service(session_maker, price_service, clock):
    return TradingService(
        session_maker=session_maker,
        price_service=price_service,
        calendar=MarketCalendar(),
        initial_balance=Decimal("100000.00"),
        default_account_key="global",
        clock=clock,
    )
