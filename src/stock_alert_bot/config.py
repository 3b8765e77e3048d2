"""Application settings loaded from the environment (and an optional .env file)."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from functools import lru_cache

from dotenv import load_dotenv

from stock_alert_bot.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

QUOTE_PROVIDERS = ("finnhub", "yfinance")


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid integer for %s: %r", name, raw)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid number for %s: %r", name, raw)
        return default


def _env_decimal(name: str, default: Decimal) -> Decimal:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return Decimal(raw.strip())
    except InvalidOperation:
        logger.warning("Ignoring invalid decimal for %s: %r", name, raw)
        return default


def _env_decimal_list(name: str, default: tuple[Decimal, ...]) -> tuple[Decimal, ...]:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        levels = tuple(Decimal(token.strip()) for token in raw.split(",") if token.strip())
    except InvalidOperation:
        logger.warning("Ignoring invalid list for %s: %r", name, raw)
        return default
    return tuple(sorted(levels)) or default


@dataclass
class Settings:
    bot_token: str = ""
    telegram_api_url: str = "https://api.telegram.org"
    telegram_webhook_url: str = ""
    telegram_webhook_secret: str = ""
    telegram_poll_timeout_seconds: int = 30

    finnhub_api_key: str = ""
    finnhub_api_url: str = "https://finnhub.io/api/v1"
    marketaux_api_key: str = ""
    marketaux_api_url: str = "https://api.marketaux.com/v1"
    quote_provider: str = "finnhub"

    database_url: str = "sqlite:///stock_alert_bot.db"
    sql_echo: bool = False

    price_alert_threshold: Decimal = Decimal("5")
    alert_interval_seconds: int = 300
    alert_initial_delay_seconds: int = 5
    alert_symbol_delay_seconds: float = 1.0
    watch_alert_levels: tuple[Decimal, ...] = field(
        default_factory=lambda: (Decimal("3"), Decimal("5"))
    )
    session_ttl_seconds: int = 600
    news_limit: int = 5

    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def webhook_enabled(self) -> bool:
        return bool(self.telegram_webhook_url)

    @property
    def news_enabled(self) -> bool:
        return bool(self.marketaux_api_key)

    def validate_for_bot(self) -> None:
        """Raise ConfigurationError if the bot cannot start with these settings."""
        missing = []
        if not self.bot_token:
            missing.append("BOT_TOKEN")
        if self.quote_provider == "finnhub" and not self.finnhub_api_key:
            missing.append("FINNHUB_API_KEY")
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        if not self.news_enabled:
            logger.warning("MARKETAUX_API_KEY is not set; /news is disabled")


def _validate_settings(settings: Settings) -> None:
    if settings.quote_provider not in QUOTE_PROVIDERS:
        raise ConfigurationError(
            f"QUOTE_PROVIDER must be one of {', '.join(QUOTE_PROVIDERS)}, "
            f"got {settings.quote_provider!r}"
        )
    if settings.price_alert_threshold <= 0:
        raise ConfigurationError("PRICE_ALERT_THRESHOLD must be greater than 0")
    if any(level <= 0 for level in settings.watch_alert_levels):
        raise ConfigurationError("WATCH_ALERT_LEVELS must all be greater than 0")
    if settings.alert_interval_seconds <= 0:
        raise ConfigurationError("ALERT_INTERVAL_SECONDS must be greater than 0")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv()
    settings = Settings(
        bot_token=_env("BOT_TOKEN"),
        telegram_api_url=_env("TELEGRAM_API_URL", "https://api.telegram.org"),
        telegram_webhook_url=_env("TELEGRAM_WEBHOOK_URL"),
        telegram_webhook_secret=_env("TELEGRAM_WEBHOOK_SECRET"),
        telegram_poll_timeout_seconds=_env_int("TELEGRAM_POLL_TIMEOUT_SECONDS", 30),
        finnhub_api_key=_env("FINNHUB_API_KEY"),
        finnhub_api_url=_env("FINNHUB_API_URL", "https://finnhub.io/api/v1"),
        marketaux_api_key=_env("MARKETAUX_API_KEY"),
        marketaux_api_url=_env("MARKETAUX_API_URL", "https://api.marketaux.com/v1"),
        quote_provider=_env("QUOTE_PROVIDER", "finnhub").lower(),
        database_url=_env("DATABASE_URL", "sqlite:///stock_alert_bot.db"),
        sql_echo=_env_bool("SQL_ECHO", False),
        price_alert_threshold=_env_decimal("PRICE_ALERT_THRESHOLD", Decimal("5")),
        alert_interval_seconds=_env_int("ALERT_INTERVAL_SECONDS", 300),
        alert_initial_delay_seconds=_env_int("ALERT_INITIAL_DELAY_SECONDS", 5),
        alert_symbol_delay_seconds=_env_float("ALERT_SYMBOL_DELAY_SECONDS", 1.0),
        watch_alert_levels=_env_decimal_list(
            "WATCH_ALERT_LEVELS", (Decimal("3"), Decimal("5"))
        ),
        session_ttl_seconds=_env_int("SESSION_TTL_SECONDS", 600),
        news_limit=_env_int("NEWS_LIMIT", 5),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
        host=_env("HOST", "127.0.0.1"),
        port=_env_int("PORT", 8000),
    )
    _validate_settings(settings)
    return settings


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process (entry points only)."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # httpx logs every request URL at INFO, which includes the bot token.
    logging.getLogger("httpx").setLevel(logging.WARNING)
