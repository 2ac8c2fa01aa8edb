"""
Trading Router

REST endpoints for the paper trading engine:
- Balance, positions, pending orders, history and P&L
- Market/limit order placement and cancellation
- Demo/live mode switching and market status
- Manual pending-order sweep and account reset

Every endpoint accepts an optional ?account= identity; without it the
shared default account is used. Domain errors (AppError) are turned into
HTTP responses by the handler registered in main.py.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from papertrade.constants import TradingMode
from papertrade.routers.dependencies import get_limit_order_monitor, get_trading_service
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
from papertrade.services.limit_order_monitor import LimitOrderMonitor
from papertrade.services.trading_service import TradingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trading", tags=["trading"])


async def _mode_of(service: TradingService, account: Optional[str]) -> TradingMode:
    return TradingMode.DEMO if await service.is_demo_mode(account) else TradingMode.LIVE


@router.get("/balance", response_model=BalanceResponse)
async def get_balance(
    account: Optional[str] = Query(None),
    service: TradingService = Depends(get_trading_service),
):
    """Cash balance in the account's active mode."""
    balance = await service.get_balance(account)
    return BalanceResponse(
        account=service.resolve_account_key(account),
        mode=await _mode_of(service, account),
        balance=balance,
    )


@router.get("/positions", response_model=List[PositionResponse])
async def get_positions(
    account: Optional[str] = Query(None),
    service: TradingService = Depends(get_trading_service),
):
    positions = await service.get_positions(account)
    return [PositionResponse.model_validate(p) for p in positions]


@router.get("/orders", response_model=List[PendingOrderResponse])
async def get_pending_orders(
    account: Optional[str] = Query(None),
    service: TradingService = Depends(get_trading_service),
):
    orders = await service.get_pending_orders(account)
    return [PendingOrderResponse.model_validate(o) for o in orders]


@router.post("/orders", response_model=OrderResultResponse)
async def place_order(
    request: OrderRequest,
    account: Optional[str] = Query(None),
    service: TradingService = Depends(get_trading_service),
):
    """
    Place a market or limit order.

    Market orders return the fill; limit orders return the queued order id.
    """
    result = await service.place_order(
        side=request.side,
        symbol=request.symbol,
        quantity=request.quantity,
        order_kind=request.order_type,
        limit_price=request.limit_price,
        account_key=account,
    )
    return OrderResultResponse.model_validate(result)


@router.delete("/orders/{order_id}", response_model=CancelledOrderResponse)
async def cancel_order(
    order_id: int,
    account: Optional[str] = Query(None),
    service: TradingService = Depends(get_trading_service),
):
    cancelled = await service.cancel_order(order_id, account)
    return CancelledOrderResponse.model_validate(cancelled)


@router.post("/orders/check", response_model=SweepResponse)
async def check_pending_orders(monitor: LimitOrderMonitor = Depends(get_limit_order_monitor)):
    """Run the pending order sweep now instead of waiting for the next interval."""
    result = await monitor.run_once()
    return SweepResponse(
        checked=result.checked,
        filled=[OrderResultResponse.model_validate(f) for f in result.filled],
        skipped=result.skipped,
        unpriced_symbols=result.unpriced_symbols,
    )


@router.get("/history", response_model=List[OrderHistoryResponse])
async def get_order_history(
    account: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    service: TradingService = Depends(get_trading_service),
):
    history = await service.get_order_history(account, limit=limit)
    return [OrderHistoryResponse.model_validate(h) for h in history]


@router.get("/pnl", response_model=PnLResponse)
async def get_pnl(
    account: Optional[str] = Query(None),
    service: TradingService = Depends(get_trading_service),
):
    pnl = await service.get_pnl(account)
    return PnLResponse(
        account=service.resolve_account_key(account),
        mode=await _mode_of(service, account),
        unrealized_pnl=pnl,
    )


@router.get("/mode", response_model=ModeResponse)
async def get_mode(
    account: Optional[str] = Query(None),
    service: TradingService = Depends(get_trading_service),
):
    mode = await _mode_of(service, account)
    return ModeResponse(account=service.resolve_account_key(account), mode=mode, is_demo_mode=mode == TradingMode.DEMO)


@router.post("/mode", response_model=ModeResponse)
async def set_mode(
    request: ModeRequest,
    account: Optional[str] = Query(None),
    service: TradingService = Depends(get_trading_service),
):
    mode = await service.set_demo_mode(request.demo, account)
    return ModeResponse(account=service.resolve_account_key(account), mode=mode, is_demo_mode=mode == TradingMode.DEMO)


@router.get("/market-status", response_model=MarketStatusResponse)
async def get_market_status(service: TradingService = Depends(get_trading_service)):
    return MarketStatusResponse(**service.get_market_status())


@router.post("/reset", response_model=BalanceResponse)
async def reset_account(
    account: Optional[str] = Query(None),
    service: TradingService = Depends(get_trading_service),
):
    """Reset the active mode to the initial balance with no positions or pending orders."""
    balance = await service.reset_account(account)
    logger.info(f"Account reset via API: account={service.resolve_account_key(account)}")
    return BalanceResponse(
        account=service.resolve_account_key(account),
        mode=await _mode_of(service, account),
        balance=balance,
    )


@router.get("/monitor")
async def get_monitor_status(monitor: LimitOrderMonitor = Depends(get_limit_order_monitor)):
    """Background sweep loop status"""
    return monitor.get_status()
