"""Finnhub quote provider for stocks."""
import logging

import httpx

from stock_alert_bot.exceptions import NotFoundError, StockBotError
from stock_alert_bot.providers.core import (ProviderErrorMapper,
                                            QuoteProviderABC, round2)
from stock_alert_bot.providers.core.utils import normalize_stock_symbol
from stock_alert_bot.providers.finnhub.models import (FinnhubCompanyProfile,
                                                      FinnhubQuoteParams,
                                                      FinnhubQuotePayload)
from stock_alert_bot.schemas import Quote
from stock_alert_bot.utils import parse_timestamp

logger = logging.getLogger(__name__)


class FinnhubQuoteProvider(QuoteProviderABC):
    """Quote provider for stocks via the Finnhub REST API.

    A /quote payload whose current price is 0 or missing means Finnhub does not
    know the symbol. HTTP 429 is reported as RateLimitedError.
    """

    name = "finnhub"
    BASE_URL = "https://finnhub.io/api/v1"

    def __init__(
        self,
        api_key: str,
        base_url: str = BASE_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Finnhub provider.

        Args:
            api_key: Finnhub API token.
            base_url: API root, overridable for tests.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests use MockTransport).
        """
        self._api_key = api_key
        self._errors = ProviderErrorMapper(resource_name="Stock", api_name="Finnhub")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def get_quote(self, symbol: str) -> Quote:
        """Fetch the current quote for a stock symbol."""
        sym = normalize_stock_symbol(symbol)
        params = FinnhubQuoteParams(symbol=sym, token=self._api_key).model_dump()
        try:
            response = await self._client.get("/quote", params=params)
            response.raise_for_status()
            payload = FinnhubQuotePayload.model_validate(response.json() or {})
        except Exception as e:  # pylint: disable=broad-except
            self._errors.raise_domain(e, symbol=sym)

        if not payload.current:
            raise NotFoundError(f"No data found for symbol: {sym}", symbol=sym)

        return Quote(
            symbol=sym,
            current_price=payload.current,
            change=round2(payload.change),
            percent_change=round2(payload.percent_change),
            high=payload.high,
            low=payload.low,
            open=payload.open,
            previous_close=payload.previous_close,
            timestamp=parse_timestamp(payload.timestamp),
        )

    async def get_company_profile(self, symbol: str) -> FinnhubCompanyProfile | None:
        """Fetch the company profile; returns None on any failure."""
        try:
            sym = normalize_stock_symbol(symbol)
            params = FinnhubQuoteParams(symbol=sym, token=self._api_key).model_dump()
            response = await self._client.get("/stock/profile2", params=params)
            response.raise_for_status()
            data = response.json()
        except (StockBotError, httpx.HTTPError, ValueError) as e:
            logger.warning("Company profile lookup failed for %s: %s", symbol, e)
            return None
        if not data:
            return None
        return FinnhubCompanyProfile.model_validate(data)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
