"""Factories for building providers and the MarketService from settings."""
from stock_alert_bot.config import Settings
from stock_alert_bot.providers import (FinnhubQuoteProvider,
                                       MarketauxNewsProvider,
                                       YFinanceQuoteProvider)
from stock_alert_bot.providers.core import (NewsProviderABC,
                                            ProviderErrorMapper,
                                            QuoteProviderABC)
from stock_alert_bot.services.market_service import MarketService


def create_quote_provider(settings: Settings) -> QuoteProviderABC:
    """Build the quote provider selected by QUOTE_PROVIDER."""
    if settings.quote_provider == "yfinance":
        return YFinanceQuoteProvider()
    return FinnhubQuoteProvider(
        api_key=settings.finnhub_api_key,
        base_url=settings.finnhub_api_url,
    )


def create_news_provider(settings: Settings) -> NewsProviderABC | None:
    """Build the news provider, or None when MARKETAUX_API_KEY is not set."""
    if not settings.news_enabled:
        return None
    return MarketauxNewsProvider(
        api_key=settings.marketaux_api_key,
        base_url=settings.marketaux_api_url,
    )


def create_market_service(
    quote_provider: QuoteProviderABC,
    news_provider: NewsProviderABC | None = None,
) -> MarketService:
    """Create a MarketService with error mappers named after the providers.

    Args:
        quote_provider: The stock quote provider.
        news_provider: The news provider, or None when news is disabled.

    Returns:
        A configured MarketService instance.
    """
    return MarketService(
        quote_provider,
        news_provider,
        quote_errors=ProviderErrorMapper(resource_name="Stock", api_name=quote_provider.name),
        news_errors=ProviderErrorMapper(
            resource_name="News",
            api_name=news_provider.name if news_provider else "News API",
        ),
    )
