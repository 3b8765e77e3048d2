"""Tests for the interactive removal dialog."""
import asyncio
from decimal import Decimal

import pytest

from stock_alert_bot.exceptions import (InsufficientQuantityError,
                                        InvalidArgumentError, NotFoundError,
                                        SessionExpiredError)
from stock_alert_bot.services import (InMemorySessionStore, RemovalDialog,
                                      RemovalState)

CHAT = "1001"


@pytest.fixture
def holding(portfolio_engine, user):
    asyncio.run(portfolio_engine.add_position(user.id, "AAPL", "150", "10"))
    return user


class TestSelect:
    def test_snapshots_position(self, dialog, holding):
        session = asyncio.run(dialog.select(CHAT, holding.id, "aapl"))

        assert session.symbol == "AAPL"
        assert session.current_quantity == Decimal("10")
        assert session.average_price == Decimal("150")
        assert session.state is RemovalState.SYMBOL_SELECTED
        assert dialog.current(CHAT) is session

    def test_symbol_not_held(self, dialog, holding):
        with pytest.raises(NotFoundError):
            asyncio.run(dialog.select(CHAT, holding.id, "MSFT"))
        assert dialog.current(CHAT) is None

    def test_new_selection_replaces_old(self, dialog, portfolio_engine, holding):
        asyncio.run(portfolio_engine.add_position(holding.id, "MSFT", "400", "2"))
        asyncio.run(dialog.select(CHAT, holding.id, "AAPL"))
        dialog.choose_partial(CHAT)

        session = asyncio.run(dialog.select(CHAT, holding.id, "MSFT"))

        assert session.symbol == "MSFT"
        assert not dialog.is_awaiting_quantity(CHAT)


class TestPartialRemoval:
    def test_happy_path(self, dialog, portfolio_engine, holding):
        asyncio.run(dialog.select(CHAT, holding.id, "AAPL"))
        dialog.choose_partial(CHAT, "AAPL")
        assert dialog.is_awaiting_quantity(CHAT)

        staged = dialog.submit_quantity(CHAT, "4")
        assert staged.state is RemovalState.CONFIRMING
        assert staged.remove_quantity == Decimal("4")

        result = asyncio.run(dialog.confirm(CHAT))

        assert result.removed_quantity == Decimal("4")
        assert result.remaining_quantity == Decimal("6")
        assert not result.fully_removed
        assert dialog.current(CHAT) is None
        position = asyncio.run(portfolio_engine.get_position(holding.id, "AAPL"))
        assert position.quantity == Decimal("6")

    def test_typed_quantity_staged_at_storage_precision(self, dialog, holding):
        asyncio.run(dialog.select(CHAT, holding.id, "AAPL"))
        dialog.choose_partial(CHAT)

        staged = dialog.submit_quantity(CHAT, "1.00005")
        assert staged.remove_quantity == Decimal("1.0001")

        result = asyncio.run(dialog.confirm(CHAT))

        assert result.removed_quantity == staged.remove_quantity
        assert result.remaining_quantity == Decimal("8.9999")

    def test_quantity_rounding_to_zero_keeps_waiting(self, dialog, holding):
        asyncio.run(dialog.select(CHAT, holding.id, "AAPL"))
        dialog.choose_partial(CHAT)

        with pytest.raises(InvalidArgumentError):
            dialog.submit_quantity(CHAT, "0.00004")

        assert dialog.is_awaiting_quantity(CHAT)

    @pytest.mark.parametrize("raw", ["abc", "0", "-1", ""])
    def test_invalid_quantity_keeps_waiting(self, dialog, holding, raw):
        asyncio.run(dialog.select(CHAT, holding.id, "AAPL"))
        dialog.choose_partial(CHAT)

        with pytest.raises(InvalidArgumentError):
            dialog.submit_quantity(CHAT, raw)

        assert dialog.is_awaiting_quantity(CHAT)

    def test_more_than_held_keeps_waiting(self, dialog, holding):
        asyncio.run(dialog.select(CHAT, holding.id, "AAPL"))
        dialog.choose_partial(CHAT)

        with pytest.raises(InsufficientQuantityError) as exc_info:
            dialog.submit_quantity(CHAT, "11")

        assert exc_info.value.available == Decimal("10")
        assert dialog.is_awaiting_quantity(CHAT)
        dialog.submit_quantity(CHAT, "10")
        assert dialog.current(CHAT).state is RemovalState.CONFIRMING

    def test_quantity_without_dialog(self, dialog):
        with pytest.raises(SessionExpiredError):
            dialog.submit_quantity(CHAT, "1")


class TestFullRemoval:
    def test_removes_position(self, dialog, portfolio_engine, holding):
        asyncio.run(dialog.select(CHAT, holding.id, "AAPL"))
        staged = dialog.choose_full(CHAT, "AAPL")
        assert staged.remove_quantity == Decimal("10")

        result = asyncio.run(dialog.confirm(CHAT))

        assert result.fully_removed
        assert asyncio.run(portfolio_engine.get_position(holding.id, "AAPL")) is None

    def test_confirm_clears_session_even_on_failure(self, dialog, portfolio_engine, holding):
        asyncio.run(dialog.select(CHAT, holding.id, "AAPL"))
        dialog.choose_full(CHAT)
        # position shrinks behind the dialog's back
        asyncio.run(portfolio_engine.remove_quantity(holding.id, "AAPL", "5"))

        with pytest.raises(InsufficientQuantityError):
            asyncio.run(dialog.confirm(CHAT))

        assert dialog.current(CHAT) is None
        position = asyncio.run(portfolio_engine.get_position(holding.id, "AAPL"))
        assert position.quantity == Decimal("5")


class TestStaleSteps:
    def test_confirm_without_session(self, dialog):
        with pytest.raises(SessionExpiredError):
            asyncio.run(dialog.confirm(CHAT))

    def test_mode_for_other_symbol(self, dialog, holding):
        asyncio.run(dialog.select(CHAT, holding.id, "AAPL"))
        with pytest.raises(SessionExpiredError):
            dialog.choose_full(CHAT, "MSFT")

    def test_confirm_before_quantity(self, dialog, portfolio_engine, holding):
        asyncio.run(dialog.select(CHAT, holding.id, "AAPL"))
        dialog.choose_partial(CHAT)

        with pytest.raises(SessionExpiredError):
            asyncio.run(dialog.confirm(CHAT))

        position = asyncio.run(portfolio_engine.get_position(holding.id, "AAPL"))
        assert position.quantity == Decimal("10")

    def test_expired_session(self, portfolio_engine, holding):
        now = [0.0]
        dialog = RemovalDialog(portfolio_engine, InMemorySessionStore(600, clock=lambda: now[0]))
        asyncio.run(dialog.select(CHAT, holding.id, "AAPL"))
        now[0] = 601.0

        with pytest.raises(SessionExpiredError):
            dialog.choose_full(CHAT)


class TestCancel:
    def test_cancel_does_not_mutate(self, dialog, portfolio_engine, holding):
        asyncio.run(dialog.select(CHAT, holding.id, "AAPL"))
        dialog.choose_full(CHAT)

        assert dialog.cancel(CHAT) is True
        assert dialog.cancel(CHAT) is False
        position = asyncio.run(portfolio_engine.get_position(holding.id, "AAPL"))
        assert position.quantity == Decimal("10")
