"""Pydantic schemas passed between providers, engines and the chat transport.

Store records are plain snapshots (not ORM instances) so they can cross thread
and session boundaries safely.
"""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from stock_alert_bot.utils import HUNDRED, percent_change, to_decimal, utcnow


class Quote(BaseModel):
    """Current price snapshot for one symbol."""

    symbol: str
    current_price: float
    change: float | None = None
    percent_change: float | None = None
    high: float | None = None
    low: float | None = None
    open: float | None = None
    previous_close: float | None = None
    timestamp: datetime = Field(default_factory=utcnow)

    @property
    def price(self) -> Decimal:
        return to_decimal(self.current_price)


class NewsArticle(BaseModel):
    """A news item about a symbol."""

    title: str
    description: str | None = None
    url: str
    published_at: datetime | None = None
    source: str | None = None
    sentiment: float | None = None
    image_url: str | None = None


class UserRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    external_id: str
    display_name: str | None = None


class PositionRecord(BaseModel):
    """A user's holding of one symbol."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    symbol: str
    quantity: Decimal
    average_buy_price: Decimal
    last_notified_price: Decimal | None = None

    @property
    def invested(self) -> Decimal:
        return self.quantity * self.average_buy_price


class HolderPosition(PositionRecord):
    """A position joined with its owner's platform id (for the alert cycle)."""

    external_id: str


class WatchEntryRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    symbol: str
    base_price: Decimal
    alert3_sent: bool = False
    alert5_sent: bool = False


class WatcherEntry(WatchEntryRecord):
    """A watch entry joined with its owner's platform id (for the alert cycle)."""

    external_id: str


class RemovalResult(BaseModel):
    """Outcome of a single removal; remaining_quantity is 0 when fully removed."""

    symbol: str
    removed_quantity: Decimal
    average_buy_price: Decimal
    remaining_quantity: Decimal
    fully_removed: bool

    @property
    def remaining_value(self) -> Decimal:
        return self.remaining_quantity * self.average_buy_price


class ClearResult(BaseModel):
    deleted_count: int
    symbols: list[str] = Field(default_factory=list)

    @property
    def already_empty(self) -> bool:
        return self.deleted_count == 0


class AlertEvent(BaseModel):
    """A position moved at least the threshold away from its buy price."""

    symbol: str
    current_price: Decimal
    average_buy_price: Decimal
    percent_change_from_buy: Decimal
    quantity: Decimal


class WatchAlertEvent(BaseModel):
    """A watched symbol crossed one of the one-shot move levels."""

    symbol: str
    current_price: Decimal
    base_price: Decimal
    percent_change: Decimal
    level: Decimal


class PortfolioRow(BaseModel):
    """A position valued at a live price (or at its buy price when unpriced)."""

    position: PositionRecord
    current_price: Decimal
    priced: bool = True

    @property
    def invested(self) -> Decimal:
        return self.position.invested

    @property
    def current_value(self) -> Decimal:
        return self.position.quantity * self.current_price

    @property
    def profit_loss(self) -> Decimal:
        return self.current_value - self.invested

    @property
    def profit_loss_percent(self) -> Decimal:
        return percent_change(self.current_price, self.position.average_buy_price)


class PortfolioSummary(BaseModel):
    rows: list[PortfolioRow] = Field(default_factory=list)

    @property
    def total_invested(self) -> Decimal:
        return sum((row.invested for row in self.rows), Decimal("0"))

    @property
    def total_value(self) -> Decimal:
        return sum((row.current_value for row in self.rows), Decimal("0"))

    @property
    def total_profit_loss(self) -> Decimal:
        return self.total_value - self.total_invested

    @property
    def total_profit_loss_percent(self) -> Decimal:
        if not self.total_invested:
            return Decimal("0")
        return self.total_profit_loss / self.total_invested * HUNDRED


class StockCheck(BaseModel):
    """Quote for a symbol plus the user's position in it, if any."""

    quote: Quote
    position: PositionRecord | None = None

    @property
    def profit_loss(self) -> Decimal | None:
        if self.position is None:
            return None
        return (self.quote.price - self.position.average_buy_price) * self.position.quantity

    @property
    def profit_loss_percent(self) -> Decimal | None:
        if self.position is None:
            return None
        return percent_change(self.quote.price, self.position.average_buy_price)


class WatchlistRow(BaseModel):
    entry: WatchEntryRecord
    current_price: Decimal

    @property
    def percent_change(self) -> Decimal:
        return percent_change(self.current_price, self.entry.base_price)


class AlertCycleReport(BaseModel):
    """Counters for one alert cycle, used for logging and the admin CLI."""

    symbols_checked: int = 0
    symbols_skipped: int = 0
    alerts_sent: int = 0
    watch_alerts_sent: int = 0
    delivery_failures: int = 0
    completed: bool = False


__all__ = [
    "AlertCycleReport",
    "AlertEvent",
    "ClearResult",
    "HolderPosition",
    "NewsArticle",
    "PortfolioRow",
    "PortfolioSummary",
    "PositionRecord",
    "Quote",
    "RemovalResult",
    "StockCheck",
    "UserRecord",
    "WatchAlertEvent",
    "WatchEntryRecord",
    "WatcherEntry",
    "WatchlistRow",
]
