"""Database models for the stock alert bot.

Only user state is persisted: who the users are, what they hold, and which
symbols they watch. Quotes are fetched on demand and never stored.
"""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from stock_alert_bot.utils import utcnow

PRICE_DIGITS = 18
PRICE_PLACES = 4
QUANTITY_PLACES = 4


class User(SQLModel, table=True):
    """A chat platform user, identified by the platform's opaque user id."""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    external_id: str = Field(unique=True, index=True, max_length=255)
    display_name: str | None = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=utcnow)


class Position(SQLModel, table=True):
    """One holding per (user, symbol); deleted instead of stored at quantity 0."""

    __tablename__ = "positions"
    __table_args__ = (UniqueConstraint("user_id", "symbol", name="uq_position_user_symbol"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    symbol: str = Field(max_length=20, index=True)
    quantity: Decimal = Field(max_digits=PRICE_DIGITS, decimal_places=QUANTITY_PLACES)
    average_buy_price: Decimal = Field(max_digits=PRICE_DIGITS, decimal_places=PRICE_PLACES)
    last_notified_price: Decimal | None = Field(
        default=None, max_digits=PRICE_DIGITS, decimal_places=PRICE_PLACES
    )
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class WatchlistEntry(SQLModel, table=True):
    """A tracked (not owned) symbol with one-shot move alerts relative to base_price."""

    __tablename__ = "watchlist_entries"
    __table_args__ = (UniqueConstraint("user_id", "symbol", name="uq_watch_user_symbol"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    symbol: str = Field(max_length=20, index=True)
    base_price: Decimal = Field(max_digits=PRICE_DIGITS, decimal_places=PRICE_PLACES)
    alert3_sent: bool = False
    alert5_sent: bool = False
    created_at: datetime = Field(default_factory=utcnow)
