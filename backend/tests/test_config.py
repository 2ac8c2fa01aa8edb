"""Tests for papertrade/config.py"""

from datetime import time
from decimal import Decimal

import pytest
from pydantic import ValidationError

from papertrade.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ["INITIAL_BALANCE", "LOG_LEVEL", "PRICE_CACHE_TTL_SECONDS"]:
            monkeypatch.delenv(name, raising=False)

        s = Settings(_env_file=None)

        assert s.initial_balance == Decimal("100000.00")
        assert s.price_cache_ttl_seconds == 60
        assert s.price_fetch_max_attempts == 3
        assert s.market_open_time == time(9, 30)
        assert s.market_close_time == time(16, 0)
        assert s.default_account_key == "global"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("INITIAL_BALANCE", "2500.50")
        monkeypatch.setenv("log_level", "debug")
        monkeypatch.setenv("MARKET_OPEN_TIME", "10:00")

        s = Settings(_env_file=None)

        assert s.initial_balance == Decimal("2500.50")
        assert s.log_level == "DEBUG"
        assert s.market_open_time == time(10, 0)

    def test_volatility_bounds(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, demo_volatility=1.5)
