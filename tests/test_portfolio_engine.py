"""Tests for add/merge, removal and clear-all on the portfolio engine."""
import asyncio
from decimal import Decimal

import pytest

from stock_alert_bot.exceptions import (InsufficientQuantityError,
                                        InvalidArgumentError, NotFoundError)
from stock_alert_bot.services.portfolio_engine import quantize_amount


class TestAddPosition:
    def test_first_add_creates_position(self, portfolio_engine, user):
        position = asyncio.run(portfolio_engine.add_position(user.id, "aapl", "180.50", "10"))

        assert position.symbol == "AAPL"
        assert position.quantity == Decimal("10")
        assert position.average_buy_price == Decimal("180.50")
        assert position.last_notified_price is None

    def test_repeat_add_sums_quantity_and_replaces_price(self, portfolio_engine, user):
        asyncio.run(portfolio_engine.add_position(user.id, "AAPL", Decimal("180.50"), Decimal("10")))
        position = asyncio.run(
            portfolio_engine.add_position(user.id, "AAPL", Decimal("190.00"), Decimal("5"))
        )

        assert position.quantity == Decimal("15")
        assert position.average_buy_price == Decimal("190.00")
        stored = asyncio.run(portfolio_engine.get_position(user.id, "AAPL"))
        assert stored.quantity == Decimal("15")
        assert stored.average_buy_price == Decimal("190")

    def test_concurrent_adds_do_not_lose_updates(self, portfolio_engine, user):
        async def add_many():
            await asyncio.gather(
                *[portfolio_engine.add_position(user.id, "MSFT", "400", "1") for _ in range(10)]
            )

        asyncio.run(add_many())

        position = asyncio.run(portfolio_engine.get_position(user.id, "MSFT"))
        assert position.quantity == Decimal("10")
        assert len(portfolio_engine._locks) == 0

    def test_fractional_quantity(self, portfolio_engine, user):
        position = asyncio.run(portfolio_engine.add_position(user.id, "TSLA", "250", "0.5"))
        assert position.quantity == Decimal("0.5")

    @pytest.mark.parametrize(
        "symbol,price,quantity",
        [
            ("", "10", "1"),
            ("WAYTOOLONGSYMBOL", "10", "1"),
            ("AAPL", "0", "1"),
            ("AAPL", "-5", "1"),
            ("AAPL", "10", "0"),
            ("AAPL", "abc", "1"),
            ("AAPL", "10", "NaN"),
            ("AAPL", "10", "0.00004"),
            ("AAPL", "1e30", "1"),
            ("AAPL", "10", "1e30"),
            ("AAPL", "100000000000000", "1"),
            ("AAPL", "99999999999999.99999", "1"),
        ],
    )
    def test_invalid_input_rejected(self, portfolio_engine, user, symbol, price, quantity):
        with pytest.raises(InvalidArgumentError):
            asyncio.run(portfolio_engine.add_position(user.id, symbol, price, quantity))
        assert asyncio.run(portfolio_engine.list_positions(user.id)) == []

    def test_users_are_isolated(self, portfolio_engine, portfolio_store, user):
        other = portfolio_store.get_or_create_user("2002", "bob")
        asyncio.run(portfolio_engine.add_position(user.id, "AAPL", "180", "1"))

        assert asyncio.run(portfolio_engine.list_positions(other.id)) == []


class TestRemoveQuantity:
    def test_partial_removal_keeps_price(self, portfolio_engine, user):
        asyncio.run(portfolio_engine.add_position(user.id, "AAPL", "190", "15"))

        result = asyncio.run(portfolio_engine.remove_quantity(user.id, "AAPL", "5"))

        assert not result.fully_removed
        assert result.removed_quantity == Decimal("5")
        assert result.remaining_quantity == Decimal("10")
        assert result.average_buy_price == Decimal("190")
        position = asyncio.run(portfolio_engine.get_position(user.id, "AAPL"))
        assert position.quantity == Decimal("10")

    def test_removing_everything_deletes_position(self, portfolio_engine, user):
        asyncio.run(portfolio_engine.add_position(user.id, "AAPL", "180.50", "10"))
        asyncio.run(portfolio_engine.add_position(user.id, "AAPL", "190.00", "5"))

        result = asyncio.run(portfolio_engine.remove_quantity(user.id, "AAPL", "15"))

        assert result.fully_removed
        assert result.remaining_quantity == 0
        assert asyncio.run(portfolio_engine.get_position(user.id, "AAPL")) is None
        assert asyncio.run(portfolio_engine.list_positions(user.id)) == []

    def test_fractional_removals_down_to_zero(self, portfolio_engine, user):
        asyncio.run(portfolio_engine.add_position(user.id, "AAPL", "100", "0.3"))
        asyncio.run(portfolio_engine.remove_quantity(user.id, "AAPL", "0.1"))

        result = asyncio.run(portfolio_engine.remove_quantity(user.id, "AAPL", "0.2"))

        assert result.fully_removed
        assert asyncio.run(portfolio_engine.get_position(user.id, "AAPL")) is None

    def test_over_removal_fails_and_leaves_quantity(self, portfolio_engine, user):
        asyncio.run(portfolio_engine.add_position(user.id, "AAPL", "190", "15"))

        with pytest.raises(InsufficientQuantityError) as excinfo:
            asyncio.run(portfolio_engine.remove_quantity(user.id, "AAPL", "16"))

        assert excinfo.value.available == Decimal("15")
        position = asyncio.run(portfolio_engine.get_position(user.id, "AAPL"))
        assert position.quantity == Decimal("15")

    def test_missing_symbol_is_not_found(self, portfolio_engine, user):
        with pytest.raises(NotFoundError):
            asyncio.run(portfolio_engine.remove_quantity(user.id, "NVDA", "1"))

    def test_non_positive_quantity_rejected(self, portfolio_engine, user):
        asyncio.run(portfolio_engine.add_position(user.id, "AAPL", "190", "15"))
        with pytest.raises(InvalidArgumentError):
            asyncio.run(portfolio_engine.remove_quantity(user.id, "AAPL", "0"))

    def test_remove_all_positions(self, portfolio_engine, user):
        asyncio.run(portfolio_engine.add_position(user.id, "AAPL", "190", "15"))
        asyncio.run(portfolio_engine.add_position(user.id, "MSFT", "400", "2.5"))

        results = asyncio.run(portfolio_engine.remove_all_positions(user.id))

        assert [r.symbol for r in results] == ["AAPL", "MSFT"]
        assert all(r.fully_removed for r in results)
        assert asyncio.run(portfolio_engine.list_positions(user.id)) == []


class TestClearAll:
    def test_empty_portfolio(self, portfolio_engine, user):
        result = asyncio.run(portfolio_engine.clear_all(user.id))
        assert result.deleted_count == 0
        assert result.already_empty

    def test_clears_every_position(self, portfolio_engine, user):
        for symbol in ("AAPL", "MSFT", "TSLA"):
            asyncio.run(portfolio_engine.add_position(user.id, symbol, "100", "1"))

        result = asyncio.run(portfolio_engine.clear_all(user.id))

        assert result.deleted_count == 3
        assert sorted(result.symbols) == ["AAPL", "MSFT", "TSLA"]
        assert asyncio.run(portfolio_engine.list_positions(user.id)) == []


class TestQuantizeAmount:
    @pytest.mark.parametrize(
        "raw,expected",
        [("1.00005", "1.0001"), ("1.00004", "1"), ("99999999999999.9999", "99999999999999.9999")],
    )
    def test_rounds_half_up_to_four_places(self, raw, expected):
        assert quantize_amount(raw, "Quantity") == Decimal(expected)

    @pytest.mark.parametrize("raw", ["1e30", "1e14", "Infinity", "sNaN", "1e-30"])
    def test_out_of_range_is_invalid_argument(self, raw):
        with pytest.raises(InvalidArgumentError):
            quantize_amount(raw, "Price")


class TestUserLocks:
    def test_lock_released_when_store_raises(self, portfolio_engine, user):
        with pytest.raises(NotFoundError):
            asyncio.run(portfolio_engine.remove_quantity(user.id, "AAPL", "1"))
        assert len(portfolio_engine._locks) == 0

    def test_locks_dropped_after_interleaved_users(self, portfolio_engine, portfolio_store, user):
        other = portfolio_store.get_or_create_user("2002", "bob")

        async def interleave():
            await asyncio.gather(
                portfolio_engine.add_position(user.id, "AAPL", "100", "1"),
                portfolio_engine.add_position(other.id, "AAPL", "100", "1"),
                portfolio_engine.clear_all(user.id),
            )

        asyncio.run(interleave())

        assert len(portfolio_engine._locks) == 0
