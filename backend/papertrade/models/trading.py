"""Trading models: accounts, positions, pending orders, order history."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from papertrade.constants import TradingMode
from papertrade.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    """
    Paper trading account.

    Holds two independent cash balances, one per trading mode, plus the
    flag that selects which partition subsequent operations use. Created
    on first reference to an account key and never deleted.
    """
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    account_key = Column(String, nullable=False, unique=True, index=True)  # "global" or a per-user identity
    is_demo_mode = Column(Boolean, nullable=False, default=False)

    demo_balance = Column(Numeric(18, 2), nullable=False)
    live_balance = Column(Numeric(18, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    positions = relationship("Position", back_populates="account", cascade="all, delete-orphan")
    pending_orders = relationship("PendingOrder", back_populates="account", cascade="all, delete-orphan")

    @property
    def mode(self) -> TradingMode:
        return TradingMode.DEMO if self.is_demo_mode else TradingMode.LIVE

    def get_balance(self, mode: TradingMode) -> Decimal:
        """Cash balance of one mode; the two are never combined"""
        return Decimal(self.demo_balance if mode == TradingMode.DEMO else self.live_balance)

    def set_balance(self, mode: TradingMode, value: Decimal):
        if mode == TradingMode.DEMO:
            self.demo_balance = value
        else:
            self.live_balance = value


class Position(Base):
    """
    Open equity position for one (account, mode, symbol).

    Rows exist only while quantity > 0; a position sold down to zero
    is deleted, so average_cost is always defined.
    """
    __tablename__ = "positions"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    mode = Column(String, nullable=False)  # "demo" or "live"
    symbol = Column(String, nullable=False)

    quantity = Column(Integer, nullable=False)
    average_cost = Column(Numeric(18, 6), nullable=False)  # Weighted average of all buy fills

    opened_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    account = relationship("Account", back_populates="positions")

    __table_args__ = (UniqueConstraint("account_id", "mode", "symbol", name="uq_position_account_mode_symbol"),)


class PendingOrder(Base):
    """
    Unfilled limit order.

    Quantity and limit price are fixed at creation. The row is deleted
    when the order fills or is cancelled.
    """

    __tablename__ = "pending_orders"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    mode = Column(String, nullable=False, index=True)

    side = Column(String, nullable=False)  # "BUY" or "SELL"
    symbol = Column(String, nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    limit_price = Column(Numeric(18, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    account = relationship("Account", back_populates="pending_orders")


class OrderHistory(Base):
    """
    Append-only record of every executed fill, market or limit.
    """

    __tablename__ = "order_history"

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)

    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    mode = Column(String, nullable=False)

    side = Column(String, nullable=False)  # "BUY" or "SELL"
    symbol = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(18, 2), nullable=False)  # Fill price (limit price for limit fills)
    order_type = Column(String, nullable=False)  # "MARKET" or "LIMIT"
    pending_order_id = Column(Integer, nullable=True)  # Source pending order for limit fills
