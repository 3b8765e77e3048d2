"""Shared utilities for market data providers."""
import re

from stock_alert_bot.exceptions import InvalidArgumentError

DECIMALS = 2
MAX_SYMBOL_LENGTH = 10

_SYMBOL_RE = re.compile(r"^[A-Z0-9.\-]{1,%d}$" % MAX_SYMBOL_LENGTH)


def normalize_stock_symbol(symbol: str) -> str:
    """Normalize a stock symbol (strip, uppercase) and validate its shape.

    Raises:
        InvalidArgumentError: Empty, longer than 10 characters, or not a ticker.
    """
    sym = (symbol or "").strip().upper()
    if not _SYMBOL_RE.match(sym):
        raise InvalidArgumentError(f"Invalid stock symbol: {symbol!r}")
    return sym


def round2(x: float | None) -> float | None:
    """Round a value to 2 decimal places; preserve None."""
    if x is None:
        return None
    return round(float(x), DECIMALS)
