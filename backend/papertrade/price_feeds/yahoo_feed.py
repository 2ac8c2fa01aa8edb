"""
Yahoo Finance Price Feed

Implements PriceFeed using the public (unauthenticated) chart endpoint:
  GET {quote_api_url}/{symbol}?interval=1d&range=1d

Only meta.regularMarketPrice is used.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import httpx

from papertrade.price_feeds.base import PriceFeed, PriceFeedError, PriceQuote

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; papertrade/0.1)"


class YahooPriceFeed(PriceFeed):
    """Best-effort HTTP lookup of the latest regular-market price."""

    def __init__(self, base_url: str, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        super().__init__(name="yahoo")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, headers={"User-Agent": USER_AGENT})
        return self._client

    async def _request(self, symbol: str) -> Dict[str, Any]:
        client = self._get_client()
        resp = await client.get(f"{self.base_url}/{symbol}", params={"interval": "1d", "range": "1d"})
        resp.raise_for_status()
        return resp.json()

    async def get_quote(self, symbol: str) -> PriceQuote:
        data = await self._request(symbol)

        chart = data.get("chart") or {}
        if chart.get("error"):
            raise PriceFeedError(f"Quote error for {symbol}: {chart['error']}")

        results = chart.get("result") or []
        if not results:
            raise PriceFeedError(f"No quote data for {symbol}")

        raw_price = (results[0].get("meta") or {}).get("regularMarketPrice")
        try:
            price = Decimal(str(raw_price))
        except (InvalidOperation, ValueError):
            raise PriceFeedError(f"Unparseable price for {symbol}: {raw_price!r}")

        if not price.is_finite() or price <= 0:
            raise PriceFeedError(f"Invalid price for {symbol}: {raw_price!r}")

        return PriceQuote(
            symbol=symbol,
            price=price,
            timestamp=datetime.now(timezone.utc),
            source=self.name,
        )

    async def close(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
