"""SQL implementation of the watchlist store."""
from decimal import Decimal

from sqlalchemy import Engine, delete, select, update

from stock_alert_bot.db.models import User, WatchlistEntry
from stock_alert_bot.db.sessions import (get_session, store_errors,
                                         upsert_statement)
from stock_alert_bot.schemas import WatchEntryRecord, WatcherEntry
from stock_alert_bot.utils import utcnow

_entries = WatchlistEntry.__table__
_users = User.__table__


class SqlWatchlistStore:
    """WatchlistStore backed by the ``watchlist_entries`` table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @store_errors
    def upsert_watch(self, user_id: int, symbol: str, base_price: Decimal) -> WatchEntryRecord:
        """Start watching a symbol; re-watching resets the base price and alert flags."""
        stmt = upsert_statement(self._engine, _entries).values(
            user_id=user_id,
            symbol=symbol,
            base_price=base_price,
            alert3_sent=False,
            alert5_sent=False,
            created_at=utcnow(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "symbol"],
            set_={
                "base_price": stmt.excluded.base_price,
                "alert3_sent": False,
                "alert5_sent": False,
            },
        )
        with get_session(self._engine) as session:
            session.execute(stmt)
            row = session.execute(
                select(_entries).where(_entries.c.user_id == user_id, _entries.c.symbol == symbol)
            ).one()
            return WatchEntryRecord.model_validate(dict(row._mapping))

    @store_errors
    def delete_watch(self, user_id: int, symbol: str) -> bool:
        with get_session(self._engine) as session:
            result = session.execute(
                delete(_entries).where(_entries.c.user_id == user_id, _entries.c.symbol == symbol)
            )
            return bool(result.rowcount)

    @store_errors
    def list_watchlist(self, user_id: int) -> list[WatchEntryRecord]:
        with get_session(self._engine) as session:
            rows = session.execute(
                select(_entries).where(_entries.c.user_id == user_id).order_by(_entries.c.symbol)
            ).all()
            return [WatchEntryRecord.model_validate(dict(row._mapping)) for row in rows]

    @store_errors
    def delete_watchlist(self, user_id: int) -> int:
        with get_session(self._engine) as session:
            result = session.execute(delete(_entries).where(_entries.c.user_id == user_id))
            return result.rowcount or 0

    @store_errors
    def list_all_watch_entries(self) -> list[WatcherEntry]:
        """Watch entries with at least one alert level still pending, with owner ids."""
        with get_session(self._engine) as session:
            rows = session.execute(
                select(_entries, _users.c.external_id)
                .join(_users, _users.c.id == _entries.c.user_id)
                .where(_entries.c.alert5_sent.is_(False))
                .order_by(_entries.c.symbol, _entries.c.id)
            ).all()
            return [WatcherEntry.model_validate(dict(row._mapping)) for row in rows]

    @store_errors
    def mark_watch_alerts(self, entry_id: int, *, alert3_sent: bool, alert5_sent: bool) -> None:
        with get_session(self._engine) as session:
            session.execute(
                update(_entries)
                .where(_entries.c.id == entry_id)
                .values(alert3_sent=alert3_sent, alert5_sent=alert5_sent)
            )
