from papertrade.schemas.trading import (
    BalanceResponse,
    CancelledOrderResponse,
    MarketStatusResponse,
    ModeRequest,
    ModeResponse,
    OrderHistoryResponse,
    OrderRequest,
    OrderResultResponse,
    PendingOrderResponse,
    PnLResponse,
    PositionResponse,
    SweepResponse,
)

__all__ = [
    "BalanceResponse",
    "CancelledOrderResponse",
    "MarketStatusResponse",
    "ModeRequest",
    "ModeResponse",
    "OrderHistoryResponse",
    "OrderRequest",
    "OrderResultResponse",
    "PendingOrderResponse",
    "PnLResponse",
    "PositionResponse",
    "SweepResponse",
]
