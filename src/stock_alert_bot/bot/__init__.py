"""Telegram transport: client, update routing and alert delivery."""
from stock_alert_bot.bot.dispatcher import Dispatcher
from stock_alert_bot.bot.notifications import TelegramNotificationSink
from stock_alert_bot.bot.telegram_client import TelegramAPIError, TelegramClient

__all__ = ["Dispatcher", "TelegramAPIError", "TelegramClient", "TelegramNotificationSink"]
