"""Abstract base class for quote providers."""
from abc import ABC, abstractmethod

from stock_alert_bot.schemas import Quote


class QuoteProviderABC(ABC):
    """Base interface for all stock quote providers.

    Implementations raise the domain taxonomy: NotFoundError for an unknown
    symbol, RateLimitedError when throttled and UnavailableError otherwise.
    """

    name: str = "quotes"

    @abstractmethod
    async def get_quote(self, symbol: str) -> Quote:
        """Fetch the current quote for a symbol.

        Args:
            symbol: Normalized stock ticker (e.g. "AAPL").

        Returns:
            A Quote with the current price and day statistics.
        """

    async def close(self) -> None:
        """Clean up resources (connections, clients).

        Override in subclasses if cleanup is needed.
        """

    async def __aenter__(self) -> "QuoteProviderABC":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()
