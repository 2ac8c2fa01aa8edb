"""Pydantic schemas for the trading API"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from papertrade.constants import OrderKind, OrderSide, TradingMode


class OrderRequest(BaseModel):
    side: OrderSide
    symbol: str = Field(..., min_length=1, max_length=16)
    quantity: int
    order_type: OrderKind = OrderKind.MARKET
    limit_price: Optional[Decimal] = None

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, v: str) -> str:
        return v.strip().upper()


class ModeRequest(BaseModel):
    demo: bool


class BalanceResponse(BaseModel):
    account: str
    mode: TradingMode
    balance: Decimal


class ModeResponse(BaseModel):
    account: str
    mode: TradingMode
    is_demo_mode: bool


class PositionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    symbol: str
    mode: TradingMode
    quantity: int
    average_cost: Decimal


class PendingOrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    mode: TradingMode
    side: OrderSide
    symbol: str
    quantity: int
    limit_price: Decimal
    created_at: datetime


class OrderHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    timestamp: datetime
    mode: TradingMode
    side: OrderSide
    symbol: str
    quantity: int
    price: Decimal
    order_type: OrderKind


class OrderResultResponse(BaseModel):
    """Either an executed fill (executed=True, price set) or a queued limit order"""
    model_config = ConfigDict(from_attributes=True)

    executed: bool
    side: OrderSide
    symbol: str
    quantity: int
    order_kind: OrderKind
    mode: TradingMode
    price: Optional[Decimal] = None
    balance_after: Optional[Decimal] = None
    order_id: Optional[int] = None
    limit_price: Optional[Decimal] = None


class CancelledOrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_id: int
    side: OrderSide
    symbol: str
    quantity: int
    limit_price: Decimal
    mode: TradingMode


class PnLResponse(BaseModel):
    account: str
    mode: TradingMode
    unrealized_pnl: Decimal


class MarketStatusResponse(BaseModel):
    is_open: bool
    exchange_time: datetime
    next_open: datetime


class SweepResponse(BaseModel):
    checked: int
    filled: List[OrderResultResponse]
    skipped: List[int]
    unpriced_symbols: List[str]
