"""
Price Service

Single entry point for prices used by the trading engine:
- Demo mode: random-walk simulator, no external calls
- Live mode: cached quote if fresh, else the external feed with
  retry and exponential backoff

A failed refresh never falls back to a stale cached price.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Awaitable, Callable, Optional

from papertrade.cache import PriceCache
from papertrade.constants import CENT
from papertrade.exceptions import PriceUnavailableError
from papertrade.price_feeds.base import PriceFeed
from papertrade.price_feeds.demo_feed import DemoPriceSimulator

logger = logging.getLogger(__name__)


class PriceService:
    """Caching, retrying wrapper around a PriceFeed plus the demo simulator"""

    def __init__(
        self,
        feed: PriceFeed,
        cache: PriceCache,
        demo_prices: DemoPriceSimulator,
        max_attempts: int = 3,
        backoff_base: float = 2.0,
        timeout_seconds: Optional[float] = 10.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.feed = feed
        self.cache = cache
        self.demo_prices = demo_prices
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self.timeout_seconds = timeout_seconds
        self._sleep = sleep

    async def get_price(self, symbol: str, demo: bool = False) -> Decimal:
        """
        Current price for symbol.

        Raises:
            PriceUnavailableError: live fetch failed on every attempt
        """
        if demo:
            return self.demo_prices.next_price(symbol)

        cached = await self.cache.get(symbol)
        if cached is not None:
            return cached

        price = await self._fetch_with_retry(symbol)
        await self.cache.set(symbol, price)
        return price

    async def _fetch_once(self, symbol: str) -> Decimal:
        if self.timeout_seconds:
            quote = await asyncio.wait_for(self.feed.get_quote(symbol), timeout=self.timeout_seconds)
        else:
            quote = await self.feed.get_quote(symbol)

        # Fills, balances and history are all kept in whole cents
        price = Decimal(quote.price).quantize(CENT)
        if price <= 0:
            raise ValueError(f"price {quote.price} rounds to {price}")
        return price

    async def _fetch_with_retry(self, symbol: str) -> Decimal:
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                price = await self._fetch_once(symbol)
                if attempt > 1:
                    logger.info(f"Fetched {symbol} price {price} on attempt {attempt}")
                return price
            except Exception as e:
                last_error = e
                logger.warning(
                    f"Price fetch for {symbol} failed (attempt {attempt}/{self.max_attempts}): "
                    f"{type(e).__name__}: {e}"
                )
                if attempt < self.max_attempts:
                    await self._sleep(self.backoff_base ** attempt)

        raise PriceUnavailableError(symbol, reason=str(last_error) if last_error else "")
