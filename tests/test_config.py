from decimal import Decimal

import pytest

from stock_alert_bot.config import Settings, get_settings
from stock_alert_bot.exceptions import ConfigurationError

ENV_VARS = (
    "BOT_TOKEN", "FINNHUB_API_KEY", "MARKETAUX_API_KEY", "QUOTE_PROVIDER",
    "PRICE_ALERT_THRESHOLD", "ALERT_INTERVAL_SECONDS", "WATCH_ALERT_LEVELS",
    "SESSION_TTL_SECONDS", "SQL_ECHO", "LOG_LEVEL", "TELEGRAM_WEBHOOK_URL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestGetSettings:
    def test_defaults(self):
        settings = get_settings()

        assert settings.quote_provider == "finnhub"
        assert settings.price_alert_threshold == Decimal("5")
        assert settings.watch_alert_levels == (Decimal("3"), Decimal("5"))
        assert settings.session_ttl_seconds == 600
        assert not settings.webhook_enabled
        assert not settings.news_enabled

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("BOT_TOKEN", "123:abc")
        monkeypatch.setenv("QUOTE_PROVIDER", "YFinance")
        monkeypatch.setenv("PRICE_ALERT_THRESHOLD", "7.5")
        monkeypatch.setenv("WATCH_ALERT_LEVELS", "10, 2")
        monkeypatch.setenv("SQL_ECHO", "yes")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("TELEGRAM_WEBHOOK_URL", "https://bot.example.com/telegram/webhook")

        settings = get_settings()

        assert settings.bot_token == "123:abc"
        assert settings.quote_provider == "yfinance"
        assert settings.price_alert_threshold == Decimal("7.5")
        assert settings.watch_alert_levels == (Decimal("2"), Decimal("10"))
        assert settings.sql_echo is True
        assert settings.log_level == "DEBUG"
        assert settings.webhook_enabled

    def test_invalid_numbers_fall_back(self, monkeypatch):
        monkeypatch.setenv("ALERT_INTERVAL_SECONDS", "often")
        monkeypatch.setenv("PRICE_ALERT_THRESHOLD", "lots")

        settings = get_settings()

        assert settings.alert_interval_seconds == 300
        assert settings.price_alert_threshold == Decimal("5")

    @pytest.mark.parametrize(
        "name,value",
        [("QUOTE_PROVIDER", "bloomberg"), ("PRICE_ALERT_THRESHOLD", "0"), ("WATCH_ALERT_LEVELS", "-3,5")],
    )
    def test_rejects_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ConfigurationError):
            get_settings()


class TestValidateForBot:
    def test_requires_token_and_finnhub_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings().validate_for_bot()
        assert "BOT_TOKEN" in str(exc_info.value)
        assert "FINNHUB_API_KEY" in str(exc_info.value)

    def test_yfinance_needs_no_key(self):
        Settings(bot_token="123:abc", quote_provider="yfinance").validate_for_bot()
