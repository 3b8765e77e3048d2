"""Domain concept for mapping provider exceptions to the bot's error taxonomy."""
import asyncio
from dataclasses import dataclass

import httpx

from stock_alert_bot.exceptions import (NotFoundError, RateLimitedError,
                                        StockBotError, UnavailableError)


@dataclass(frozen=True)
class ProviderErrorMapper:
    """Maps provider/backend exceptions to StockBotError subclasses.

    Inject this into providers and services to centralize error mapping per
    upstream (e.g. Finnhub quotes, Marketaux news) with appropriate resource
    and API names.
    """

    resource_name: str = "Resource"
    api_name: str = "API"

    def _not_found(self, symbol: str | None) -> NotFoundError:
        if symbol is None:
            return NotFoundError(f"{self.resource_name} not found")
        return NotFoundError(f"{self.resource_name} '{symbol}' not found", symbol=symbol)

    def to_domain(
        self,
        exc: Exception,
        symbol: str | None = None,
    ) -> StockBotError:
        """Map a provider exception to a domain error.

        Args:
            exc: The exception raised by the provider or its transport.
            symbol: Optional symbol to include in the message (e.g. "AAPL").

        Returns:
            The StockBotError to raise in place of exc. Domain errors pass through.
        """
        if isinstance(exc, StockBotError):
            return exc
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            if status == 404:
                return self._not_found(symbol)
            if status == 429:
                return RateLimitedError(f"{self.api_name} rate limit exceeded")
            return UnavailableError(f"{self.api_name} error ({status})")
        if isinstance(exc, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
            detail = "Request timed out"
            if symbol is not None:
                detail = f"Request to {self.api_name} timed out for '{symbol}'"
            return UnavailableError(detail)
        if isinstance(exc, (httpx.TransportError, OSError)):
            return UnavailableError(f"{self.api_name} is unreachable")
        if isinstance(exc, (ValueError, KeyError, TypeError)):
            return self._not_found(symbol)
        return UnavailableError(f"{self.api_name} error")

    def raise_domain(
        self,
        exc: Exception,
        symbol: str | None = None,
    ) -> None:
        """Map provider exception and raise the domain error. Never returns."""
        error = self.to_domain(exc, symbol=symbol)
        if error is exc:
            raise error
        raise error from exc
