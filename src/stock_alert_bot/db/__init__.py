"""Database package: models, engine/session management and repositories."""
from stock_alert_bot.db.models import Position, User, WatchlistEntry

__all__ = ["Position", "User", "WatchlistEntry"]
