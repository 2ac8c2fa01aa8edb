"""
Domain exceptions for the application.

Services raise these instead of fastapi.HTTPException to avoid coupling
the trading engine to the web framework. A global exception handler in
main.py translates them into HTTP responses.
"""


class AppError(Exception):
    """Base application error with an HTTP-equivalent status code."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(AppError):
    """Input validation failure (400)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class InvalidQuantityError(ValidationError):
    """Order quantity is not a positive whole number of shares."""

    def __init__(self, quantity):
        self.quantity = quantity
        super().__init__(f"Quantity must be positive (got {quantity})")


class InvalidLimitPriceError(ValidationError):
    """Limit order placed without a positive limit price."""

    def __init__(self, limit_price, message: str = None):
        self.limit_price = limit_price
        if message is None:
            if limit_price is None:
                message = "Limit price is required for limit orders"
            else:
                message = f"Limit price must be positive (got {limit_price})"
        super().__init__(message)


class InsufficientSharesError(AppError):
    """Sell quantity exceeds the held position (400)."""

    def __init__(self, symbol: str, requested: int, available: int):
        self.symbol = symbol
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient shares of {symbol}. Available: {available}, Requested: {requested}",
            status_code=400,
        )


class InsufficientFundsError(AppError):
    """Buy cost exceeds the cash balance (400)."""

    def __init__(self, required, available):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient funds. Available: {available}, Required: {required}",
            status_code=400,
        )


class MarketClosedError(AppError):
    """Live market order outside regular trading hours (409)."""

    def __init__(self, message: str = "Market orders are only accepted during market hours (9:30 AM - 4:00 PM ET)"):
        super().__init__(message, status_code=409)


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, status_code=404)


class OrderNotFoundError(NotFoundError):
    """Pending order does not exist, was already filled, or belongs to another mode."""

    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class ExchangeUnavailableError(AppError):
    """Market data provider unavailable (503)."""

    def __init__(self, message: str = "Price service unavailable"):
        super().__init__(message, status_code=503)


class PriceUnavailableError(ExchangeUnavailableError):
    """No price could be obtained for a symbol after all retries."""

    def __init__(self, symbol: str, reason: str = ""):
        self.symbol = symbol
        message = f"Failed to fetch price for {symbol}. Please try again later."
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
