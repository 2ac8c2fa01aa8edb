"""
Price feeds

- PriceFeed / PriceQuote: provider-agnostic interface
- YahooPriceFeed: live prices over HTTP (httpx)
- DemoPriceSimulator: random-walk prices for demo mode
"""

from papertrade.price_feeds.base import PriceFeed, PriceFeedError, PriceQuote
from papertrade.price_feeds.demo_feed import DemoPriceSimulator
from papertrade.price_feeds.yahoo_feed import YahooPriceFeed

__all__ = [
    "PriceFeed",
    "PriceFeedError",
    "PriceQuote",
    "DemoPriceSimulator",
    "YahooPriceFeed",
]
