"""SQL implementation of the portfolio store.

Every mutation is a single short transaction. Quantity changes happen in SQL
(``quantity = quantity + :q`` / conditional ``quantity - :q``) so concurrent
adds and removals on the same row never lose updates.
"""
from decimal import Decimal

from sqlalchemy import Engine, delete, select, update

from stock_alert_bot.db.models import Position, User
from stock_alert_bot.db.sessions import (get_session, store_errors,
                                         upsert_statement)
from stock_alert_bot.exceptions import (InsufficientQuantityError,
                                        NotFoundError)
from stock_alert_bot.schemas import (HolderPosition, PositionRecord,
                                     RemovalResult, UserRecord)
from stock_alert_bot.utils import utcnow

_positions = Position.__table__
_users = User.__table__


class SqlPortfolioStore:
    """PortfolioStore backed by the ``users`` and ``positions`` tables."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @store_errors
    def get_or_create_user(self, external_id: str, display_name: str | None) -> UserRecord:
        """Idempotently create the user row for a platform id and return it."""
        stmt = (
            upsert_statement(self._engine, _users)
            .values(external_id=external_id, display_name=display_name, created_at=utcnow())
            .on_conflict_do_nothing(index_elements=["external_id"])
        )
        with get_session(self._engine) as session:
            session.execute(stmt)
            row = session.execute(
                select(_users).where(_users.c.external_id == external_id)
            ).one()
            return UserRecord.model_validate(dict(row._mapping))

    @store_errors
    def list_positions(self, user_id: int) -> list[PositionRecord]:
        with get_session(self._engine) as session:
            rows = session.execute(
                select(_positions)
                .where(_positions.c.user_id == user_id)
                .order_by(_positions.c.symbol)
            ).all()
            return [PositionRecord.model_validate(dict(row._mapping)) for row in rows]

    @store_errors
    def get_position(self, user_id: int, symbol: str) -> PositionRecord | None:
        with get_session(self._engine) as session:
            row = session.execute(
                select(_positions).where(
                    _positions.c.user_id == user_id, _positions.c.symbol == symbol
                )
            ).one_or_none()
            return PositionRecord.model_validate(dict(row._mapping)) if row else None

    @store_errors
    def upsert_position(
        self, user_id: int, symbol: str, price: Decimal, quantity: Decimal
    ) -> PositionRecord:
        """Insert a position, or add to its quantity and replace its buy price."""
        now = utcnow()
        stmt = upsert_statement(self._engine, _positions).values(
            user_id=user_id,
            symbol=symbol,
            quantity=quantity,
            average_buy_price=price,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "symbol"],
            set_={
                "quantity": _positions.c.quantity + stmt.excluded.quantity,
                "average_buy_price": stmt.excluded.average_buy_price,
                "updated_at": now,
            },
        )
        with get_session(self._engine) as session:
            session.execute(stmt)
            row = session.execute(
                select(_positions).where(
                    _positions.c.user_id == user_id, _positions.c.symbol == symbol
                )
            ).one()
            return PositionRecord.model_validate(dict(row._mapping))

    @store_errors
    def decrement_position(
        self, user_id: int, symbol: str, quantity: Decimal, dust: Decimal
    ) -> RemovalResult:
        """Atomically remove quantity; delete the row if the remainder is dust.

        Raises:
            NotFoundError: No position for (user, symbol).
            InsufficientQuantityError: quantity exceeds the held quantity.
        """
        match = (_positions.c.user_id == user_id) & (_positions.c.symbol == symbol)
        with get_session(self._engine) as session:
            result = session.execute(
                update(_positions)
                .where(match, _positions.c.quantity + dust >= quantity)
                .values(quantity=_positions.c.quantity - quantity, updated_at=utcnow())
            )
            if result.rowcount == 0:
                held = session.execute(
                    select(_positions.c.quantity).where(match)
                ).scalar_one_or_none()
                if held is None:
                    raise NotFoundError(f"{symbol} is not in the portfolio", symbol=symbol)
                raise InsufficientQuantityError(symbol, quantity, held)

            row = session.execute(select(_positions).where(match)).one()
            remaining = row.quantity
            fully_removed = remaining <= dust
            if fully_removed:
                session.execute(delete(_positions).where(match))
            return RemovalResult(
                symbol=symbol,
                removed_quantity=quantity,
                average_buy_price=row.average_buy_price,
                remaining_quantity=Decimal("0") if fully_removed else remaining,
                fully_removed=fully_removed,
            )

    @store_errors
    def delete_positions(self, user_id: int) -> int:
        with get_session(self._engine) as session:
            result = session.execute(delete(_positions).where(_positions.c.user_id == user_id))
            return result.rowcount or 0

    @store_errors
    def list_all_positions(self) -> list[HolderPosition]:
        """All positions across users, joined with the owner's platform id."""
        with get_session(self._engine) as session:
            rows = session.execute(
                select(_positions, _users.c.external_id)
                .join(_users, _users.c.id == _positions.c.user_id)
                .order_by(_positions.c.symbol, _positions.c.id)
            ).all()
            return [HolderPosition.model_validate(dict(row._mapping)) for row in rows]

    @store_errors
    def update_last_notified(self, position_id: int, price: Decimal) -> None:
        with get_session(self._engine) as session:
            session.execute(
                update(_positions)
                .where(_positions.c.id == position_id)
                .values(last_notified_price=price)
            )
