"""Marketaux news provider."""
import httpx

from stock_alert_bot.providers.core import (NewsProviderABC,
                                            ProviderErrorMapper)
from stock_alert_bot.providers.core.utils import normalize_stock_symbol
from stock_alert_bot.providers.marketaux.models import (MarketauxNewsParams,
                                                        MarketauxNewsResponse)
from stock_alert_bot.schemas import NewsArticle


class MarketauxNewsProvider(NewsProviderABC):
    """Latest entity-filtered English news per symbol via Marketaux."""

    name = "marketaux"
    BASE_URL = "https://api.marketaux.com/v1"

    def __init__(
        self,
        api_key: str,
        base_url: str = BASE_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._errors = ProviderErrorMapper(resource_name="News", api_name="Marketaux")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def get_news(self, symbol: str, limit: int = 5) -> list[NewsArticle]:
        sym = normalize_stock_symbol(symbol)
        params = MarketauxNewsParams(
            symbols=sym, api_token=self._api_key, limit=limit
        ).model_dump()
        try:
            response = await self._client.get("/news/all", params=params)
            response.raise_for_status()
            body = MarketauxNewsResponse.model_validate(response.json() or {})
        except Exception as e:  # pylint: disable=broad-except
            self._errors.raise_domain(e, symbol=sym)

        return [
            NewsArticle(
                title=item.title,
                description=item.description,
                url=item.url,
                published_at=item.published_at,
                source=item.source,
                sentiment=item.sentiment,
                image_url=item.image_url,
            )
            for item in body.data or []
        ]

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
