"""DI container. Build with init_container(); routes reach it via request.app.state.container."""
from dependency_injector import containers, providers
from fastapi import Request

from stock_alert_bot.bot import (Dispatcher, TelegramClient,
                                 TelegramNotificationSink)
from stock_alert_bot.bot.handlers import (GeneralHandlers, MarketHandlers,
                                          PortfolioHandlers, RemovalHandlers,
                                          WatchHandlers)
from stock_alert_bot.config import Settings, get_settings
from stock_alert_bot.db.portfolio_repository import SqlPortfolioStore
from stock_alert_bot.db.sessions import create_db_engine
from stock_alert_bot.db.watchlist_repository import SqlWatchlistStore
from stock_alert_bot.services import (AlertEngine, AlertScheduler,
                                      InMemorySessionStore, PortfolioEngine,
                                      RemovalDialog, WatchlistService)
from stock_alert_bot.services.market_factory import (create_market_service,
                                                     create_news_provider,
                                                     create_quote_provider)


class Container(containers.DeclarativeContainer):
    settings = providers.Singleton(get_settings)

    db_engine = providers.Singleton(
        create_db_engine,
        settings.provided.database_url,
        echo=settings.provided.sql_echo,
    )
    portfolio_store = providers.Singleton(SqlPortfolioStore, db_engine)
    watchlist_store = providers.Singleton(SqlWatchlistStore, db_engine)

    quote_provider = providers.Singleton(create_quote_provider, settings)
    news_provider = providers.Singleton(create_news_provider, settings)
    market_service = providers.Singleton(create_market_service, quote_provider, news_provider)

    telegram_client = providers.Singleton(
        TelegramClient,
        token=settings.provided.bot_token,
        base_url=settings.provided.telegram_api_url,
    )
    notification_sink = providers.Singleton(TelegramNotificationSink, telegram_client)

    portfolio_engine = providers.Singleton(PortfolioEngine, portfolio_store)
    session_store = providers.Singleton(
        InMemorySessionStore, ttl_seconds=settings.provided.session_ttl_seconds
    )
    removal_dialog = providers.Singleton(RemovalDialog, portfolio_engine, session_store)
    watchlist_service = providers.Singleton(WatchlistService, watchlist_store, market_service)

    alert_engine = providers.Singleton(
        AlertEngine,
        portfolio_store,
        watchlist_store,
        market_service,
        notification_sink,
        threshold=settings.provided.price_alert_threshold,
        watch_levels=settings.provided.watch_alert_levels,
        symbol_delay_seconds=settings.provided.alert_symbol_delay_seconds,
    )
    scheduler = providers.Singleton(
        AlertScheduler,
        alert_engine.provided.run_cycle,
        interval_seconds=settings.provided.alert_interval_seconds,
        initial_delay_seconds=settings.provided.alert_initial_delay_seconds,
    )

    dispatcher = providers.Singleton(
        Dispatcher,
        telegram_client,
        portfolio_engine,
        general=providers.Factory(GeneralHandlers, threshold=settings.provided.price_alert_threshold),
        portfolio=providers.Factory(PortfolioHandlers, portfolio_engine, market_service),
        removal=providers.Factory(RemovalHandlers, portfolio_engine, removal_dialog),
        market=providers.Factory(
            MarketHandlers, portfolio_engine, market_service, news_limit=settings.provided.news_limit
        ),
        watch=providers.Factory(WatchHandlers, watchlist_service),
    )


def init_container(settings: Settings | None = None) -> Container:
    """Create the container, optionally pinned to explicit settings (tests, CLI)."""
    container = Container()
    if settings is not None:
        container.settings.override(providers.Object(settings))
    return container


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_dispatcher(request: Request) -> Dispatcher:
    return get_container(request).dispatcher()


def get_app_settings(request: Request) -> Settings:
    return get_container(request).settings()
