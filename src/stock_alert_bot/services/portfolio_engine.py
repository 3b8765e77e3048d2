"""Portfolio mutations: add (merge), partial/full removal and clear-all.

The engine validates input and serializes mutations per user; atomicity of
each individual write is the store's job. Stores are synchronous, so every
call runs in a worker thread.
"""
import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import ROUND_HALF_UP, Decimal

from stock_alert_bot.db.models import PRICE_DIGITS, PRICE_PLACES
from stock_alert_bot.exceptions import InvalidArgumentError
from stock_alert_bot.providers.core.utils import normalize_stock_symbol
from stock_alert_bot.schemas import (ClearResult, PositionRecord,
                                     RemovalResult, UserRecord)
from stock_alert_bot.services.protocols import PortfolioStore
from stock_alert_bot.utils import to_decimal

logger = logging.getLogger(__name__)

DEFAULT_DUST = Decimal("0.00001")
STORAGE_QUANTUM = Decimal("0.0001")
# Largest magnitude the Numeric(18, 4) columns can hold, exclusive.
MAX_AMOUNT = Decimal(10) ** (PRICE_DIGITS - PRICE_PLACES)


def quantize_amount(value: Decimal | float | int | str, field_name: str) -> Decimal:
    """Validate a price/quantity and round it to storage precision.

    Raises:
        InvalidArgumentError: Not a number, not positive, rounds to zero, or
            does not fit the storage column.
    """
    try:
        number = to_decimal(value)
        if not number.is_finite() or number <= 0:
            raise InvalidArgumentError(f"{field_name} must be greater than 0")
        if number >= MAX_AMOUNT:
            raise InvalidArgumentError(f"{field_name} is too large")
        number = number.quantize(STORAGE_QUANTUM, rounding=ROUND_HALF_UP)
    except ArithmeticError as e:
        raise InvalidArgumentError(f"{field_name} must be a number") from e
    if number <= 0:
        raise InvalidArgumentError(f"{field_name} is too small")
    if number >= MAX_AMOUNT:
        raise InvalidArgumentError(f"{field_name} is too large")
    return number


class _UserLocks:
    """Per-user asyncio locks that are dropped once nobody holds or awaits them."""

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, user_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._users[user_id] = self._users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[user_id] -= 1
            if not self._users[user_id]:
                del self._users[user_id]
                del self._locks[user_id]


class PortfolioEngine:
    """Per-user portfolio state machine over a PortfolioStore."""

    def __init__(self, store: PortfolioStore, dust: Decimal = DEFAULT_DUST) -> None:
        self._store = store
        self._dust = dust
        self._locks = _UserLocks()

    @property
    def dust(self) -> Decimal:
        return self._dust

    async def ensure_user(self, external_id: str, display_name: str | None = None) -> UserRecord:
        """Get or create the user for a platform id."""
        return await asyncio.to_thread(self._store.get_or_create_user, external_id, display_name)

    async def list_positions(self, user_id: int) -> list[PositionRecord]:
        return await asyncio.to_thread(self._store.list_positions, user_id)

    async def get_position(self, user_id: int, symbol: str) -> PositionRecord | None:
        sym = normalize_stock_symbol(symbol)
        return await asyncio.to_thread(self._store.get_position, user_id, sym)

    async def add_position(
        self,
        user_id: int,
        symbol: str,
        price: Decimal | float | str,
        quantity: Decimal | float | str,
    ) -> PositionRecord:
        """Add shares: create the position, or add quantity and replace the buy price.

        The merge replaces the buy price with the incoming one; it is not a
        weighted average.

        Raises:
            InvalidArgumentError: Bad symbol, or non-positive price or quantity.
        """
        sym = normalize_stock_symbol(symbol)
        buy_price = quantize_amount(price, "Price")
        qty = quantize_amount(quantity, "Quantity")
        async with self._locks.hold(user_id):
            position = await asyncio.to_thread(
                self._store.upsert_position, user_id, sym, buy_price, qty
            )
        logger.debug("User %s added %s %s @ %s", user_id, qty, sym, buy_price)
        return position

    async def remove_quantity(
        self, user_id: int, symbol: str, quantity: Decimal | float | str
    ) -> RemovalResult:
        """Remove shares of one symbol; the position is deleted when nothing is left.

        Raises:
            InvalidArgumentError: Non-positive quantity.
            NotFoundError: The symbol is not in the portfolio.
            InsufficientQuantityError: More than the held quantity was requested.
        """
        sym = normalize_stock_symbol(symbol)
        qty = quantize_amount(quantity, "Quantity")
        async with self._locks.hold(user_id):
            result = await asyncio.to_thread(
                self._store.decrement_position, user_id, sym, qty, self._dust
            )
        logger.debug(
            "User %s removed %s %s (fully_removed=%s)", user_id, qty, sym, result.fully_removed
        )
        return result

    async def remove_all_positions(self, user_id: int) -> list[RemovalResult]:
        """Remove every held symbol through the single-removal primitive."""
        results: list[RemovalResult] = []
        for position in await self.list_positions(user_id):
            results.append(
                await self.remove_quantity(user_id, position.symbol, position.quantity)
            )
        return results

    async def clear_all(self, user_id: int) -> ClearResult:
        """Delete every position of the user in one statement."""
        async with self._locks.hold(user_id):
            positions = await asyncio.to_thread(self._store.list_positions, user_id)
            deleted = await asyncio.to_thread(self._store.delete_positions, user_id)
        return ClearResult(deleted_count=deleted, symbols=[p.symbol for p in positions])
