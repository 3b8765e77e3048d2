"""Command and callback handlers, grouped by feature."""
from stock_alert_bot.bot.handlers.general import GeneralHandlers
from stock_alert_bot.bot.handlers.market import MarketHandlers
from stock_alert_bot.bot.handlers.portfolio import PortfolioHandlers
from stock_alert_bot.bot.handlers.removal import RemovalHandlers
from stock_alert_bot.bot.handlers.watch import WatchHandlers

__all__ = [
    "GeneralHandlers",
    "MarketHandlers",
    "PortfolioHandlers",
    "RemovalHandlers",
    "WatchHandlers",
]
