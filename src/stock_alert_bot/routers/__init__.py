"""API routers."""
from stock_alert_bot.routers.telegram import router as telegram_router

__all__ = ["telegram_router"]
