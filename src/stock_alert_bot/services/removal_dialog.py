"""Interactive removal dialog: select symbol, choose mode, enter quantity, confirm.

States: idle -> symbol selected -> (partial) awaiting quantity -> confirming -> idle.
Choosing "full" goes straight from symbol selected to confirming. Every step
that needs a session and finds none raises SessionExpiredError without
touching the portfolio.
"""
import logging

from stock_alert_bot.exceptions import (InsufficientQuantityError,
                                        NotFoundError, SessionExpiredError)
from stock_alert_bot.providers.core.utils import normalize_stock_symbol
from stock_alert_bot.schemas import RemovalResult
from stock_alert_bot.services.portfolio_engine import (PortfolioEngine,
                                                      quantize_amount)
from stock_alert_bot.services.session_store import (RemovalSession,
                                                    RemovalState,
                                                    SessionStore)
from stock_alert_bot.utils import parse_positive_decimal

logger = logging.getLogger(__name__)


class RemovalDialog:
    """Drives one removal dialog per user on top of a SessionStore."""

    def __init__(self, engine: PortfolioEngine, sessions: SessionStore) -> None:
        self._engine = engine
        self._sessions = sessions

    def current(self, external_id: str) -> RemovalSession | None:
        return self._sessions.get(external_id)

    def _require(
        self,
        external_id: str,
        *states: RemovalState,
        symbol: str | None = None,
    ) -> RemovalSession:
        session = self._sessions.get(external_id)
        if session is None:
            raise SessionExpiredError("This removal session has expired. Start again with /remove")
        if symbol is not None and session.symbol != symbol:
            raise SessionExpiredError("This removal session has expired. Start again with /remove")
        if states and session.state not in states:
            raise SessionExpiredError("This removal session has expired. Start again with /remove")
        return session

    async def select(self, external_id: str, user_id: int, symbol: str) -> RemovalSession:
        """Start a dialog for a held symbol, replacing any previous dialog.

        Raises:
            NotFoundError: The symbol is not in the portfolio.
        """
        sym = normalize_stock_symbol(symbol)
        position = await self._engine.get_position(user_id, sym)
        if position is None:
            self._sessions.delete(external_id)
            raise NotFoundError(f"{sym} is not in your portfolio", symbol=sym)
        session = RemovalSession(
            user_id=user_id,
            symbol=sym,
            current_quantity=position.quantity,
            average_price=position.average_buy_price,
        )
        self._sessions.set(external_id, session)
        return session

    def choose_partial(self, external_id: str, symbol: str | None = None) -> RemovalSession:
        session = self._require(external_id, RemovalState.SYMBOL_SELECTED, symbol=symbol)
        session.state = RemovalState.AWAITING_QUANTITY
        self._sessions.set(external_id, session)
        return session

    def choose_full(self, external_id: str, symbol: str | None = None) -> RemovalSession:
        session = self._require(external_id, RemovalState.SYMBOL_SELECTED, symbol=symbol)
        session.remove_quantity = session.current_quantity
        session.state = RemovalState.CONFIRMING
        self._sessions.set(external_id, session)
        return session

    def is_awaiting_quantity(self, external_id: str) -> bool:
        session = self._sessions.get(external_id)
        return session is not None and session.waiting_for_quantity

    def submit_quantity(self, external_id: str, raw: str) -> RemovalSession:
        """Stage a typed quantity and move to confirmation.

        Invalid input leaves the session awaiting a quantity.

        Raises:
            SessionExpiredError: No dialog is waiting for a quantity.
            InvalidArgumentError: Not a positive number.
            InsufficientQuantityError: More than the snapshotted quantity.
        """
        session = self._require(external_id, RemovalState.AWAITING_QUANTITY)
        quantity = quantize_amount(parse_positive_decimal(raw, "Quantity"), "Quantity")
        if quantity > session.current_quantity:
            raise InsufficientQuantityError(session.symbol, quantity, session.current_quantity)
        session.remove_quantity = quantity
        session.state = RemovalState.CONFIRMING
        self._sessions.set(external_id, session)
        return session

    async def confirm(self, external_id: str) -> RemovalResult:
        """Execute the staged removal. The session is gone afterwards, whatever happens."""
        session = self._require(external_id, RemovalState.CONFIRMING)
        try:
            return await self._engine.remove_quantity(
                session.user_id, session.symbol, session.remove_quantity
            )
        finally:
            self._sessions.delete(external_id)

    def cancel(self, external_id: str) -> bool:
        """Drop the dialog without mutating anything; True if one existed."""
        existed = self._sessions.get(external_id) is not None
        self._sessions.delete(external_id)
        return existed
