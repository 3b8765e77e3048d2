"""Marketaux news provider."""
from stock_alert_bot.providers.marketaux.provider import MarketauxNewsProvider

__all__ = ["MarketauxNewsProvider"]
