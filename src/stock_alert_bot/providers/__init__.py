"""Quote and news providers."""
from stock_alert_bot.providers.core import NewsProviderABC, QuoteProviderABC
from stock_alert_bot.providers.finnhub import FinnhubQuoteProvider
from stock_alert_bot.providers.marketaux import MarketauxNewsProvider
from stock_alert_bot.providers.yfinance import YFinanceQuoteProvider

__all__ = [
    "FinnhubQuoteProvider",
    "MarketauxNewsProvider",
    "NewsProviderABC",
    "QuoteProviderABC",
    "YFinanceQuoteProvider",
]
