"""Core provider abstractions."""
from stock_alert_bot.providers.core.error_mapper import ProviderErrorMapper
from stock_alert_bot.providers.core.news_provider_abc import NewsProviderABC
from stock_alert_bot.providers.core.quote_provider_abc import QuoteProviderABC
from stock_alert_bot.providers.core.utils import normalize_stock_symbol, round2

__all__ = [
    "NewsProviderABC",
    "ProviderErrorMapper",
    "QuoteProviderABC",
    "normalize_stock_symbol",
    "round2",
]
