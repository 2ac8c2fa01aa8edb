from datetime import time
from typing import List
from decimal import Decimal

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite+aiosqlite:///./papertrade.db"
    database_echo: bool = False

    # Accounts
    initial_balance: Decimal = Decimal("100000.00")  # Starting cash for each mode
    default_account_key: str = "global"  # Single shared account unless callers pass their own

    # Price cache / fetch
    price_cache_ttl_seconds: int = 60
    price_fetch_max_attempts: int = 3
    price_fetch_backoff_base: float = 2.0  # Delay before retry n is base ** n seconds
    price_fetch_timeout_seconds: float = 10.0  # Per attempt
    quote_api_url: str = "https://query1.finance.yahoo.com/v8/finance/chart"

    # Demo pricing
    demo_base_price: Decimal = Decimal("100.00")
    demo_volatility: float = 0.10  # +/- 10% per read

    # Market hours (US equities)
    market_timezone: str = "America/New_York"
    market_open_time: time = time(9, 30)
    market_close_time: time = time(16, 0)

    # Pending order sweep
    sweep_interval_seconds: int = 30

    # CORS
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        """Accept lower-case level names from .env files"""
        return v.upper()

    @field_validator("demo_volatility")
    @classmethod
    def check_volatility(cls, v: float) -> float:
        if not 0 <= v < 1:
            raise ValueError("demo_volatility must be in [0, 1)")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
