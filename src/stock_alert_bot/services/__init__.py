"""Domain services: portfolio, alerts, removal dialog, watchlist and market data."""
from stock_alert_bot.services.alert_engine import (AlertEngine, should_alert,
                                                   watch_alert_level)
from stock_alert_bot.services.market_service import MarketService
from stock_alert_bot.services.portfolio_engine import PortfolioEngine
from stock_alert_bot.services.removal_dialog import RemovalDialog
from stock_alert_bot.services.scheduler import AlertScheduler
from stock_alert_bot.services.session_store import (InMemorySessionStore,
                                                    RemovalSession,
                                                    RemovalState)
from stock_alert_bot.services.watchlist import WatchlistService

__all__ = [
    "AlertEngine",
    "AlertScheduler",
    "InMemorySessionStore",
    "MarketService",
    "PortfolioEngine",
    "RemovalDialog",
    "RemovalSession",
    "RemovalState",
    "WatchlistService",
    "should_alert",
    "watch_alert_level",
]
