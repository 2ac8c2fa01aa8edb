"""
In-memory price cache

Reduces calls to the market data provider by remembering the last
quote per symbol for a fixed window. Each TradingService owns its own
cache instance so engines (and tests) never share state.
"""

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CacheEntry:
    """Single cached price with the time it was fetched"""

    def __init__(self, price: Decimal, fetched_at: datetime):
        self.price = price
        self.fetched_at = fetched_at

    def is_fresh(self, now: datetime, ttl_seconds: int) -> bool:
        return (now - self.fetched_at).total_seconds() < ttl_seconds


class PriceCache:
    """
    Symbol -> (price, fetched_at) map with a fixed freshness window.

    Safe for concurrent asyncio use. Concurrent misses for the same symbol
    are not coalesced; each caller may hit the provider.
    """

    def __init__(self, ttl_seconds: int, clock: Callable[[], datetime] = utc_now):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()

    async def get(self, symbol: str) -> Optional[Decimal]:
        """Return the cached price if still inside the window, else None"""
        async with self._lock:
            entry = self._cache.get(symbol)
            if entry is None:
                return None

            if not entry.is_fresh(self._clock(), self.ttl_seconds):
                del self._cache[symbol]
                return None

            return entry.price

    async def set(self, symbol: str, price: Decimal):
        async with self._lock:
            self._cache[symbol] = CacheEntry(price, self._clock())

    async def cleanup_expired(self):
        """Remove all expired entries"""
        async with self._lock:
            now = self._clock()
            expired = [s for s, e in self._cache.items() if not e.is_fresh(now, self.ttl_seconds)]
            for symbol in expired:
                del self._cache[symbol]
            if expired:
                logger.debug(f"Evicted {len(expired)} expired price(s)")
