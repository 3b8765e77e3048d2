"""Yahoo Finance quote provider for stocks."""
import asyncio

import yfinance as yf

from stock_alert_bot.exceptions import NotFoundError
from stock_alert_bot.providers.core import (ProviderErrorMapper,
                                            QuoteProviderABC, round2)
from stock_alert_bot.providers.core.utils import normalize_stock_symbol
from stock_alert_bot.schemas import Quote
from stock_alert_bot.utils import utcnow


class YFinanceQuoteProvider(QuoteProviderABC):
    """Quote provider for stocks via Yahoo Finance.

    Uses the yfinance library (no API key required). yfinance is blocking, so
    each lookup runs in a worker thread.
    """

    name = "yfinance"

    def __init__(self) -> None:
        self._errors = ProviderErrorMapper(resource_name="Stock", api_name="Yahoo Finance")

    def _fetch_quote_sync(self, symbol: str) -> Quote:
        """Fetch a single quote synchronously (run in thread)."""
        info = yf.Ticker(symbol).fast_info
        price = info.get("lastPrice") or info.get("regularMarketPrice")
        if not price:
            raise NotFoundError(f"No data found for symbol: {symbol}", symbol=symbol)
        previous = info.get("previousClose")
        change = pct = None
        if previous:
            change = float(price) - float(previous)
            pct = change / float(previous) * 100
        return Quote(
            symbol=symbol,
            current_price=float(price),
            change=round2(change),
            percent_change=round2(pct),
            high=info.get("dayHigh"),
            low=info.get("dayLow"),
            open=info.get("open"),
            previous_close=previous,
            timestamp=utcnow(),
        )

    async def get_quote(self, symbol: str) -> Quote:
        """Fetch the current quote for a stock symbol."""
        sym = normalize_stock_symbol(symbol)
        try:
            return await asyncio.to_thread(self._fetch_quote_sync, sym)
        except Exception as e:  # pylint: disable=broad-except
            self._errors.raise_domain(e, symbol=sym)
