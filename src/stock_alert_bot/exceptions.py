"""Error taxonomy shared by the engines, providers and the chat transport.

Expected, user-caused conditions (invalid input, unknown symbol, not enough
shares, stale dialog) are flagged ``user_facing``; they are answered to the
requesting user and never logged as operational errors. Provider and store
failures (rate limiting, unavailability) are reported as "try again later".
"""


class StockBotError(Exception):
    """Base class for every error the bot reports back to a user."""

    code: str = "error"
    user_facing: bool = False

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidArgumentError(StockBotError):
    """Malformed user input: bad symbol, non-numeric or non-positive amount."""

    code = "invalid_argument"
    user_facing = True


class NotFoundError(StockBotError):
    """Symbol not held in the portfolio, or unknown to the quote provider."""

    code = "not_found"
    user_facing = True

    def __init__(self, message: str = "", symbol: str | None = None) -> None:
        super().__init__(message)
        self.symbol = symbol


class InsufficientQuantityError(StockBotError):
    """A removal asked for more shares than the position holds."""

    code = "insufficient_quantity"
    user_facing = True

    def __init__(self, symbol: str, requested, available) -> None:
        super().__init__(
            f"Cannot remove {requested} of {symbol}: only {available} held"
        )
        self.symbol = symbol
        self.requested = requested
        self.available = available


class SessionExpiredError(StockBotError):
    """An interactive dialog step referenced a session that no longer exists."""

    code = "session_expired"
    user_facing = True


class RateLimitedError(StockBotError):
    """An upstream provider throttled the request."""

    code = "rate_limited"


class UnavailableError(StockBotError):
    """Transient store, provider or delivery failure."""

    code = "unavailable"


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing or invalid."""
