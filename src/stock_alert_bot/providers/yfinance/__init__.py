"""Yahoo Finance provider."""
from stock_alert_bot.providers.yfinance.provider import YFinanceQuoteProvider

__all__ = ["YFinanceQuoteProvider"]
