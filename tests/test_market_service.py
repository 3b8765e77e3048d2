import asyncio
from decimal import Decimal

import httpx
import pytest

from stock_alert_bot.exceptions import (InvalidArgumentError, NotFoundError,
                                        RateLimitedError, UnavailableError)
from stock_alert_bot.schemas import PositionRecord


def position(symbol: str, quantity: str, price: str) -> PositionRecord:
    return PositionRecord(
        id=1, user_id=1, symbol=symbol, quantity=Decimal(quantity), average_buy_price=Decimal(price)
    )


class TestGetQuote:
    def test_normalizes_symbol(self, market, quotes):
        quote = asyncio.run(market.get_quote(" msft "))
        assert quote.price == Decimal("410.0")
        assert quotes.calls == ["MSFT"]

    def test_rejects_malformed_symbol(self, market, quotes):
        with pytest.raises(InvalidArgumentError):
            asyncio.run(market.get_quote("$$$"))
        assert quotes.calls == []

    def test_maps_transport_errors(self, market, quotes):
        quotes.errors["AAPL"] = httpx.ConnectError("down")
        with pytest.raises(UnavailableError):
            asyncio.run(market.get_quote("AAPL"))

    def test_get_quotes_returns_failures(self, market, quotes):
        quotes.errors["MSFT"] = RateLimitedError("slow down")

        results = asyncio.run(market.get_quotes(["AAPL", "MSFT", "AAPL", "ZZZZ"]))

        assert list(results) == ["AAPL", "MSFT", "ZZZZ"]
        assert results["AAPL"].symbol == "AAPL"
        assert isinstance(results["MSFT"], RateLimitedError)
        assert isinstance(results["ZZZZ"], NotFoundError)


class TestValuePortfolio:
    def test_totals(self, market):
        summary = asyncio.run(
            market.value_portfolio([position("AAPL", "10", "150"), position("MSFT", "1", "400")])
        )

        assert summary.total_invested == Decimal("1900")
        assert summary.total_value == Decimal("2310")
        assert summary.total_profit_loss == Decimal("410")

    def test_unpriced_rows_use_buy_price(self, market, quotes):
        quotes.errors["AAPL"] = RateLimitedError("slow down")

        summary = asyncio.run(market.value_portfolio([position("AAPL", "10", "150")]))

        row = summary.rows[0]
        assert not row.priced
        assert row.current_price == Decimal("150")
        assert row.profit_loss == 0


class TestNews:
    def test_disabled_without_provider(self, market):
        assert not market.news_enabled
        with pytest.raises(UnavailableError):
            asyncio.run(market.get_news("AAPL"))

    def test_check_includes_position(self, market):
        check = asyncio.run(market.check("AAPL", position("AAPL", "2", "180")))

        assert check.profit_loss == Decimal("20.0")
        assert check.profit_loss_percent.quantize(Decimal("0.01")) == Decimal("5.56")
