"""Market data service: quotes, news and portfolio valuation.

MarketService wraps a QuoteProviderABC (and optionally a NewsProviderABC) with
symbol normalization and error mapping, so engines and handlers only ever see
the StockBotError taxonomy.
"""
import asyncio
import logging

import httpx

from stock_alert_bot.exceptions import (NotFoundError, RateLimitedError,
                                        UnavailableError)
from stock_alert_bot.providers.core import (NewsProviderABC,
                                            ProviderErrorMapper,
                                            QuoteProviderABC)
from stock_alert_bot.providers.core.utils import normalize_stock_symbol
from stock_alert_bot.schemas import (NewsArticle, PortfolioRow,
                                     PortfolioSummary, PositionRecord, Quote,
                                     StockCheck)

logger = logging.getLogger(__name__)

# Exceptions from providers we map to the domain; all others propagate (e.g. bugs, BaseException).
_PROVIDER_EXCEPTIONS: tuple[type[Exception], ...] = (
    ValueError,
    KeyError,
    TypeError,
    TimeoutError,
    OSError,
    asyncio.TimeoutError,
    httpx.HTTPError,
)

# Quote failures that are expected and never logged when valuing a portfolio.
QUIET_QUOTE_ERRORS: tuple[type[Exception], ...] = (NotFoundError, RateLimitedError)


class MarketService:
    """Unified service over the quote and news providers.

    Injected with providers and error mappers so tests can swap in fakes.
    """

    def __init__(
        self,
        quote_provider: QuoteProviderABC,
        news_provider: NewsProviderABC | None = None,
        *,
        quote_errors: ProviderErrorMapper | None = None,
        news_errors: ProviderErrorMapper | None = None,
    ) -> None:
        """Initialize with providers and error mapping config.

        Args:
            quote_provider: Stock quote provider (e.g. FinnhubQuoteProvider).
            news_provider: News provider, or None when news is disabled.
            quote_errors: Mapper for quote failures (defaults to "Stock"/"Quotes API").
            news_errors: Mapper for news failures (defaults to "News"/"News API").
        """
        self._quotes = quote_provider
        self._news = news_provider
        self._quote_errors = quote_errors or ProviderErrorMapper("Stock", "Quotes API")
        self._news_errors = news_errors or ProviderErrorMapper("News", "News API")

    @property
    def news_enabled(self) -> bool:
        return self._news is not None

    async def get_quote(self, symbol: str) -> Quote:
        """Get the current quote. Raises a StockBotError on provider errors."""
        norm = normalize_stock_symbol(symbol)
        try:
            return await self._quotes.get_quote(norm)
        except _PROVIDER_EXCEPTIONS as e:
            self._quote_errors.raise_domain(e, symbol=norm)

    async def get_news(self, symbol: str, limit: int = 5) -> list[NewsArticle]:
        """Get the latest news for a symbol; [] means no news.

        Raises:
            UnavailableError: News is not configured.
        """
        if self._news is None:
            raise UnavailableError("News is not configured")
        norm = normalize_stock_symbol(symbol)
        try:
            return await self._news.get_news(norm, limit)
        except _PROVIDER_EXCEPTIONS as e:
            self._news_errors.raise_domain(e, symbol=norm)

    async def get_quotes(self, symbols: list[str]) -> dict[str, Quote | Exception]:
        """Fetch quotes for distinct symbols concurrently; failures are returned, not raised."""
        unique = list(dict.fromkeys(symbols))
        results = await asyncio.gather(
            *[self.get_quote(s) for s in unique],
            return_exceptions=True,
        )
        out: dict[str, Quote | Exception] = {}
        for sym, result in zip(unique, results):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            out[sym] = result
        return out

    async def value_portfolio(self, positions: list[PositionRecord]) -> PortfolioSummary:
        """Value positions at live prices.

        A position whose quote fails is valued at its buy price (``priced=False``).
        """
        quotes = await self.get_quotes([p.symbol for p in positions])
        rows: list[PortfolioRow] = []
        for position in positions:
            quote = quotes[position.symbol]
            if isinstance(quote, Quote):
                rows.append(PortfolioRow(position=position, current_price=quote.price))
                continue
            if not isinstance(quote, QUIET_QUOTE_ERRORS):
                logger.warning("Quote failed for %s while valuing portfolio: %s", position.symbol, quote)
            rows.append(
                PortfolioRow(
                    position=position,
                    current_price=position.average_buy_price,
                    priced=False,
                )
            )
        return PortfolioSummary(rows=rows)

    async def check(self, symbol: str, position: PositionRecord | None = None) -> StockCheck:
        """Quote a symbol and attach the user's position for P/L, when held."""
        quote = await self.get_quote(symbol)
        return StockCheck(quote=quote, position=position)

    async def close(self) -> None:
        """Close provider resources (e.g. httpx clients)."""
        for provider in (self._quotes, self._news):
            if provider is None:
                continue
            try:
                await provider.close()
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning("Error closing provider %s: %s", type(provider).__name__, exc)
