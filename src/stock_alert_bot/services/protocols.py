"""Protocols for the collaborators the engines depend on (store, sink, sessions)."""
from decimal import Decimal
from typing import Protocol

from stock_alert_bot.schemas import (AlertEvent, HolderPosition,
                                     PositionRecord, RemovalResult,
                                     UserRecord, WatchAlertEvent,
                                     WatchEntryRecord, WatcherEntry)


class PortfolioStore(Protocol):
    """Durable per-user positions with atomic upsert and decrement."""

    def get_or_create_user(self, external_id: str, display_name: str | None) -> UserRecord:
        ...

    def list_positions(self, user_id: int) -> list[PositionRecord]:
        ...

    def get_position(self, user_id: int, symbol: str) -> PositionRecord | None:
        ...

    def upsert_position(
        self, user_id: int, symbol: str, price: Decimal, quantity: Decimal
    ) -> PositionRecord:
        """Insert, or add quantity and replace the buy price of an existing row."""
        ...

    def decrement_position(
        self, user_id: int, symbol: str, quantity: Decimal, dust: Decimal
    ) -> RemovalResult:
        """Decrement quantity; delete the row when the remainder is dust."""
        ...

    def delete_positions(self, user_id: int) -> int:
        ...

    def list_all_positions(self) -> list[HolderPosition]:
        ...

    def update_last_notified(self, position_id: int, price: Decimal) -> None:
        ...


class WatchlistStore(Protocol):
    """Durable per-user watchlist with one-shot alert flags."""

    def upsert_watch(self, user_id: int, symbol: str, base_price: Decimal) -> WatchEntryRecord:
        ...

    def delete_watch(self, user_id: int, symbol: str) -> bool:
        ...

    def list_watchlist(self, user_id: int) -> list[WatchEntryRecord]:
        ...

    def delete_watchlist(self, user_id: int) -> int:
        ...

    def list_all_watch_entries(self) -> list[WatcherEntry]:
        ...

    def mark_watch_alerts(self, entry_id: int, *, alert3_sent: bool, alert5_sent: bool) -> None:
        ...


class NotificationSink(Protocol):
    """Delivers alerts to a user. Raises UnavailableError when delivery fails."""

    async def send_alert(self, external_id: str, event: AlertEvent) -> None:
        ...

    async def send_watch_alert(self, external_id: str, event: WatchAlertEvent) -> None:
        ...
