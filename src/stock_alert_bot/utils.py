"""Shared utilities for the stock alert bot."""
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from stock_alert_bot.exceptions import InvalidArgumentError

HUNDRED = Decimal("100")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(ts: float | None) -> datetime:
    """Convert optional Unix timestamp (seconds) to an aware datetime; fallback to now."""
    if not ts:
        return utcnow()
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def to_decimal(value: Decimal | float | int | str) -> Decimal:
    """Convert a number to Decimal without binary float noise (via str)."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def parse_positive_decimal(raw: str, field_name: str) -> Decimal:
    """Parse user input as a finite, strictly positive decimal.

    Raises:
        InvalidArgumentError: If the text is not a number or not greater than 0.
    """
    try:
        value = Decimal(raw.strip().replace(",", ""))
    except (InvalidOperation, AttributeError) as e:
        raise InvalidArgumentError(f"{field_name} must be a number") from e
    if not value.is_finite() or value <= 0:
        raise InvalidArgumentError(f"{field_name} must be greater than 0")
    return value


def percent_change(current: Decimal, reference: Decimal) -> Decimal:
    """Signed percent move of current relative to reference."""
    return (current - reference) / reference * HUNDRED
