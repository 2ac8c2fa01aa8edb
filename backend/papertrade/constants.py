"""
Application Constants

Trading modes, order sides and order kinds shared by the models,
services and API schemas. Values are what gets stored in the database.
"""

from decimal import Decimal
from enum import Enum


class TradingMode(str, Enum):
    """Data partition an account is currently trading in."""

    DEMO = "demo"  # Simulated prices, simulated money
    LIVE = "live"  # Real market prices, paper money


class OrderSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class OrderKind(str, Enum):
    MARKET = "MARKET"
    LIMIT = "LIMIT"


# Quantization used for money and average cost
CENT = Decimal("0.01")
COST_PRECISION = Decimal("0.000001")


def normalize_symbol(symbol: str) -> str:
    """Ticker symbols are stored upper-case without surrounding whitespace."""
    return (symbol or "").strip().upper()
