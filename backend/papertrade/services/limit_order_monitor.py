"""
Limit Order Monitoring Service

Background loop that runs the trading engine's pending order sweep
periodically. One failed sweep is logged and the loop carries on.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from papertrade.services.trading_service import SweepResult, TradingService

logger = logging.getLogger(__name__)


class LimitOrderMonitor:
    """Runs TradingService.check_pending_orders every interval_seconds"""

    def __init__(self, trading_service: TradingService, interval_seconds: int = 30):
        self.trading_service = trading_service
        self.interval_seconds = interval_seconds
        self.running = False
        self.task: Optional[asyncio.Task] = None
        self._last_check: Optional[datetime] = None
        self._last_fill_count = 0
        self._total_fills = 0

    async def run_once(self) -> SweepResult:
        """Run a single sweep immediately (also used for manual triggering via API)."""
        result = await self.trading_service.check_pending_orders()
        self._last_check = datetime.now(timezone.utc)
        self._last_fill_count = len(result.filled)
        self._total_fills += len(result.filled)
        return result

    async def run_loop(self):
        """Background loop that runs the sweep periodically."""
        while self.running:
            try:
                await self.run_once()
                await self.trading_service.price_service.cache.cleanup_expired()
            except Exception as e:
                logger.error(f"Error in limit order monitor loop: {e}", exc_info=True)

            await asyncio.sleep(self.interval_seconds)

    async def start(self):
        """Start the background monitor."""
        if self.running:
            return

        self.running = True
        self.task = asyncio.create_task(self.run_loop())
        logger.info(f"Limit order monitor started - checking every {self.interval_seconds} seconds")

    async def stop(self):
        """Stop the background monitor."""
        self.running = False
        if self.task:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
            self.task = None
        logger.info("Limit order monitor stopped")

    def get_status(self) -> dict:
        """Get current status of the monitor."""
        return {
            "running": self.running,
            "last_check": self._last_check.isoformat() if self._last_check else None,
            "interval_seconds": self.interval_seconds,
            "last_fill_count": self._last_fill_count,
            "total_fills": self._total_fills,
        }
