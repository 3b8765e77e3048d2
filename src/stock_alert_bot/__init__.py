"""Telegram bot for personal stock portfolios with price-change alerts."""

__version__ = "0.1.0"
