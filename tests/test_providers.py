"""Tests for the HTTP providers using httpx.MockTransport."""
import asyncio

import httpx
import pytest

from stock_alert_bot.exceptions import (InvalidArgumentError, NotFoundError,
                                        RateLimitedError, UnavailableError)
from stock_alert_bot.providers import (FinnhubQuoteProvider,
                                       MarketauxNewsProvider)

QUOTE_PAYLOAD = {
    "c": 189.84,
    "d": 1.2345,
    "dp": 0.6543,
    "h": 191.0,
    "l": 187.5,
    "o": 188.0,
    "pc": 188.6055,
    "t": 1714564800,
}


def finnhub(handler) -> FinnhubQuoteProvider:
    return FinnhubQuoteProvider(
        "test-key", base_url="https://finnhub.test/api/v1", transport=httpx.MockTransport(handler)
    )


def marketaux(handler) -> MarketauxNewsProvider:
    return MarketauxNewsProvider(
        "news-key", base_url="https://marketaux.test/v1", transport=httpx.MockTransport(handler)
    )


async def _quote(provider, symbol):
    async with provider:
        return await provider.get_quote(symbol)


class TestFinnhubQuoteProvider:
    def test_parses_quote(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=QUOTE_PAYLOAD)

        quote = asyncio.run(_quote(finnhub(handler), " aapl "))

        assert seen["path"] == "/api/v1/quote"
        assert seen["params"] == {"symbol": "AAPL", "token": "test-key"}
        assert quote.symbol == "AAPL"
        assert quote.current_price == 189.84
        assert quote.change == 1.23
        assert quote.percent_change == 0.65
        assert quote.previous_close == 188.6055
        assert quote.timestamp.year == 2024

    def test_zero_price_means_unknown_symbol(self):
        def handler(request):
            return httpx.Response(200, json={"c": 0, "d": None, "dp": None, "h": 0, "l": 0, "o": 0, "pc": 0, "t": 0})

        with pytest.raises(NotFoundError) as exc_info:
            asyncio.run(_quote(finnhub(handler), "ZZZZ"))
        assert exc_info.value.symbol == "ZZZZ"

    @pytest.mark.parametrize(
        "status,error",
        [(429, RateLimitedError), (404, NotFoundError), (500, UnavailableError), (403, UnavailableError)],
    )
    def test_http_errors(self, status, error):
        def handler(request):
            return httpx.Response(status, json={"error": "nope"})

        with pytest.raises(error):
            asyncio.run(_quote(finnhub(handler), "AAPL"))

    def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UnavailableError):
            asyncio.run(_quote(finnhub(handler), "AAPL"))

    def test_invalid_symbol_skips_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=QUOTE_PAYLOAD)

        with pytest.raises(InvalidArgumentError):
            asyncio.run(_quote(finnhub(handler), "NOT A TICKER"))
        assert calls == []

    def test_company_profile(self):
        def handler(request):
            assert request.url.path.endswith("/stock/profile2")
            return httpx.Response(
                200,
                json={"ticker": "AAPL", "name": "Apple Inc", "finnhubIndustry": "Technology",
                      "marketCapitalization": 2900000.5, "currency": "USD"},
            )

        async def run():
            async with finnhub(handler) as provider:
                return await provider.get_company_profile("AAPL")

        profile = asyncio.run(run())
        assert profile.name == "Apple Inc"
        assert profile.industry == "Technology"

    def test_company_profile_failure_returns_none(self):
        def handler(request):
            return httpx.Response(500)

        async def run():
            async with finnhub(handler) as provider:
                return await provider.get_company_profile("AAPL")

        assert asyncio.run(run()) is None


class TestMarketauxNewsProvider:
    def test_parses_articles(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(
                200,
                json={
                    "meta": {"found": 1},
                    "data": [
                        {
                            "uuid": "abc",
                            "title": "Apple beats estimates",
                            "description": "Strong quarter",
                            "url": "https://news.test/apple",
                            "published_at": "2024-05-01T12:00:00.000000Z",
                            "source": "news.test",
                            "entities": [{"symbol": "AAPL", "sentiment_score": 0.61}],
                        },
                        {
                            "title": "Market wrap",
                            "url": "https://news.test/wrap",
                            "entities": [],
                        },
                    ],
                },
            )

        async def run():
            async with marketaux(handler) as provider:
                return await provider.get_news("aapl", limit=3)

        articles = asyncio.run(run())

        assert seen["path"] == "/v1/news/all"
        assert seen["params"]["symbols"] == "AAPL"
        assert seen["params"]["limit"] == "3"
        assert seen["params"]["api_token"] == "news-key"
        assert [a.title for a in articles] == ["Apple beats estimates", "Market wrap"]
        assert articles[0].sentiment == 0.61
        assert articles[0].published_at.year == 2024
        assert articles[1].sentiment is None

    def test_empty_data(self):
        def handler(request):
            return httpx.Response(200, json={"data": []})

        async def run():
            async with marketaux(handler) as provider:
                return await provider.get_news("AAPL")

        assert asyncio.run(run()) == []

    def test_rate_limited(self):
        def handler(request):
            return httpx.Response(429)

        async def run():
            async with marketaux(handler) as provider:
                return await provider.get_news("AAPL")

        with pytest.raises(RateLimitedError):
            asyncio.run(run())
