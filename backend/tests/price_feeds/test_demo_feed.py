"""Tests for papertrade/price_feeds/demo_feed.py"""

import random
from decimal import Decimal

from papertrade.price_feeds.demo_feed import DemoPriceSimulator


class TestDemoPriceSimulator:
    def test_first_read_starts_from_base(self, stub_rng):
        sim = DemoPriceSimulator(base_price=Decimal("100.00"), volatility=0.10, rng=stub_rng)

        assert sim.next_price("AAPL") == Decimal("100.00")
        assert stub_rng.calls == [(-0.10, 0.10)]

    def test_walk_compounds(self, stub_rng):
        """Happy path: each read becomes the baseline for the next."""
        stub_rng.value = -0.10
        sim = DemoPriceSimulator(rng=stub_rng)

        assert sim.next_price("AAPL") == Decimal("90.00")
        assert sim.next_price("AAPL") == Decimal("81.00")
        assert sim._prices["AAPL"] == Decimal("81.00")

    def test_symbols_walk_independently(self, stub_rng):
        stub_rng.value = 0.05
        sim = DemoPriceSimulator(rng=stub_rng)

        sim.next_price("AAPL")
        sim.next_price("AAPL")

        assert sim.next_price("MSFT") == Decimal("105.00")
        assert "TSLA" not in sim._prices

    def test_stays_within_band(self):
        """Edge case: real randomness never leaves +/- volatility of the last price."""
        sim = DemoPriceSimulator(rng=random.Random(42))
        last = Decimal("100.00")
        for _ in range(200):
            price = sim.next_price("AAPL")
            assert price > 0
            assert abs(price - last) <= last * Decimal("0.10") + Decimal("0.01")
            last = price

    def test_price_never_below_one_cent(self, stub_rng):
        stub_rng.value = -0.10
        sim = DemoPriceSimulator(base_price=Decimal("0.01"), rng=stub_rng)

        assert sim.next_price("PENNY") == Decimal("0.01")
