"""Abstract base class for news providers."""
from abc import ABC, abstractmethod

from stock_alert_bot.schemas import NewsArticle


class NewsProviderABC(ABC):
    """Base interface for symbol news providers."""

    name: str = "news"

    @abstractmethod
    async def get_news(self, symbol: str, limit: int = 5) -> list[NewsArticle]:
        """Fetch the latest articles about a symbol.

        Returns:
            Up to ``limit`` articles; an empty list means there is no news.
        """

    async def close(self) -> None:
        """Clean up resources."""

    async def __aenter__(self) -> "NewsProviderABC":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.close()
