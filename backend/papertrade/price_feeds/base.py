"""
Base Price Feed Interface

Defines the abstract interface every market data source implements.
The trading engine only relies on "a positive price for a symbol, or
an exception".
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class PriceQuote:
    """Price quote for a single symbol"""
    symbol: str
    price: Decimal
    timestamp: datetime
    source: str = "unknown"


class PriceFeedError(Exception):
    """Raised by a feed when it cannot produce a valid price."""


class PriceFeed(ABC):
    """
    Abstract base class for price feed implementations.
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def get_quote(self, symbol: str) -> PriceQuote:
        """
        Get the current price for a symbol.

        Args:
            symbol: Ticker symbol (e.g., "AAPL")

        Returns:
            PriceQuote with a positive price

        Raises:
            PriceFeedError (or a transport exception) if no price is available
        """
        pass

    async def close(self):
        """Release any network resources held by the feed"""
        return None
