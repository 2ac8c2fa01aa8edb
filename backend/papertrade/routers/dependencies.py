"""
FastAPI dependencies for the trading routers.

The TradingService and LimitOrderMonitor are built once in main.py and
stored on app.state.
"""

from fastapi import Request

from papertrade.services.limit_order_monitor import LimitOrderMonitor
from papertrade.services.trading_service import TradingService


def get_trading_service(request: Request) -> TradingService:
    return request.app.state.trading_service


def get_limit_order_monitor(request: Request) -> LimitOrderMonitor:
    return request.app.state.limit_order_monitor
