"""
Database Models

All model classes are re-exported here:
    from papertrade.models import Account, Position, ...
"""

from papertrade.database import Base  # noqa: F401
from papertrade.models.trading import Account, OrderHistory, PendingOrder, Position

__all__ = [
    "Base",
    "Account",
    "Position",
    "PendingOrder",
    "OrderHistory",
]
