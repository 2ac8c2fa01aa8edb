"""
Demo Price Simulator

Synthetic prices for demo mode. Every read moves the price by a random
multiplicative step within +/- volatility and keeps the result as the
baseline for the next read, so demo prices random-walk forward.
"""

import logging
import random
from decimal import Decimal
from typing import Dict, Optional

from papertrade.constants import CENT

logger = logging.getLogger(__name__)


class DemoPriceSimulator:
    """Per-engine random walk of demo prices, keyed by symbol"""

    def __init__(
        self,
        base_price: Decimal = Decimal("100.00"),
        volatility: float = 0.10,
        rng: Optional[random.Random] = None,
    ):
        self.base_price = Decimal(base_price)
        self.volatility = volatility
        self._rng = rng or random.Random()
        self._prices: Dict[str, Decimal] = {}

    def next_price(self, symbol: str) -> Decimal:
        """Advance the walk for symbol and return the new price"""
        current = self._prices.get(symbol, self.base_price)
        factor = 1 + self._rng.uniform(-self.volatility, self.volatility)
        new_price = (current * Decimal(str(factor))).quantize(CENT)
        if new_price <= 0:
            new_price = CENT
        self._prices[symbol] = new_price
        return new_price
