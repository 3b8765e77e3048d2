"""Finnhub provider."""
from stock_alert_bot.providers.finnhub.provider import FinnhubQuoteProvider

__all__ = ["FinnhubQuoteProvider"]
