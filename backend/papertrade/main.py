import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from papertrade.cache import PriceCache
from papertrade.config import settings
from papertrade.database import async_session_maker, init_db
from papertrade.exceptions import AppError
from papertrade.price_feeds import DemoPriceSimulator, YahooPriceFeed
from papertrade.routers import trading_router
from papertrade.services.limit_order_monitor import LimitOrderMonitor
from papertrade.services.market_calendar import MarketCalendar
from papertrade.services.price_service import PriceService
from papertrade.services.trading_service import TradingService

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Paper Trading Engine")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(trading_router.router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def build_trading_service(session_maker=async_session_maker) -> TradingService:
    """Wire the engine from settings: live feed + cache, demo simulator, calendar"""
    feed = YahooPriceFeed(settings.quote_api_url, timeout=settings.price_fetch_timeout_seconds)
    price_service = PriceService(
        feed=feed,
        cache=PriceCache(ttl_seconds=settings.price_cache_ttl_seconds),
        demo_prices=DemoPriceSimulator(
            base_price=settings.demo_base_price,
            volatility=settings.demo_volatility,
        ),
        max_attempts=settings.price_fetch_max_attempts,
        backoff_base=settings.price_fetch_backoff_base,
        timeout_seconds=settings.price_fetch_timeout_seconds,
    )
    calendar = MarketCalendar(
        tz_name=settings.market_timezone,
        open_time=settings.market_open_time,
        close_time=settings.market_close_time,
    )
    return TradingService(
        session_maker=session_maker,
        price_service=price_service,
        calendar=calendar,
        initial_balance=settings.initial_balance,
        default_account_key=settings.default_account_key,
    )


# Startup/Shutdown events
@app.on_event("startup")
async def startup_event():
    logger.info("Initializing database...")
    await init_db()

    trading_service = build_trading_service()
    app.state.trading_service = trading_service

    app.state.limit_order_monitor = LimitOrderMonitor(
        trading_service, interval_seconds=settings.sweep_interval_seconds
    )
    await app.state.limit_order_monitor.start()
    logger.info("Startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down - stopping limit order monitor...")
    monitor = getattr(app.state, "limit_order_monitor", None)
    if monitor:
        await monitor.stop()

    trading_service = getattr(app.state, "trading_service", None)
    if trading_service:
        await trading_service.price_service.feed.close()
    logger.info("Shutdown complete")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
