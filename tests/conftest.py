"""Shared fixtures: in-memory SQLite stores, fake quote provider and sink."""
import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from stock_alert_bot.db.portfolio_repository import SqlPortfolioStore
from stock_alert_bot.db.sessions import init_db
from stock_alert_bot.db.watchlist_repository import SqlWatchlistStore
from stock_alert_bot.exceptions import NotFoundError, UnavailableError
from stock_alert_bot.providers.core import QuoteProviderABC
from stock_alert_bot.schemas import Quote
from stock_alert_bot.services import (InMemorySessionStore, MarketService,
                                      PortfolioEngine, RemovalDialog,
                                      WatchlistService)


class FakeQuoteProvider(QuoteProviderABC):
    """Serves prices from a dict; symbols mapped to an exception raise it."""

    name = "fake"

    def __init__(self, prices: dict[str, float] | None = None) -> None:
        self.prices = dict(prices or {})
        self.errors: dict[str, Exception] = {}
        self.calls: list[str] = []
        self.closed = False

    async def get_quote(self, symbol: str) -> Quote:
        self.calls.append(symbol)
        if symbol in self.errors:
            raise self.errors[symbol]
        if symbol not in self.prices:
            raise NotFoundError(f"No data found for symbol: {symbol}", symbol=symbol)
        price = self.prices[symbol]
        return Quote(
            symbol=symbol,
            current_price=price,
            change=1.5,
            percent_change=0.8,
            high=price + 2,
            low=price - 2,
            open=price - 1,
            previous_close=price - 1.5,
        )

    async def close(self) -> None:
        self.closed = True


class RecordingSink:
    """NotificationSink that records deliveries; users in ``failing`` get UnavailableError."""

    def __init__(self) -> None:
        self.alerts = []
        self.watch_alerts = []
        self.failing: set[str] = set()

    async def send_alert(self, external_id, event) -> None:
        if external_id in self.failing:
            raise UnavailableError("chat unreachable")
        self.alerts.append((external_id, event))

    async def send_watch_alert(self, external_id, event) -> None:
        if external_id in self.failing:
            raise UnavailableError("chat unreachable")
        self.watch_alerts.append((external_id, event))


@pytest.fixture
def engine():
    db_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def portfolio_store(engine):
    return SqlPortfolioStore(engine)


@pytest.fixture
def watchlist_store(engine):
    return SqlWatchlistStore(engine)


@pytest.fixture
def quotes():
    return FakeQuoteProvider({"AAPL": 190.0, "MSFT": 410.0, "TSLA": 250.0})


@pytest.fixture
def market(quotes):
    return MarketService(quotes)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def portfolio_engine(portfolio_store):
    return PortfolioEngine(portfolio_store)


@pytest.fixture
def sessions():
    return InMemorySessionStore(ttl_seconds=600)


@pytest.fixture
def dialog(portfolio_engine, sessions):
    return RemovalDialog(portfolio_engine, sessions)


@pytest.fixture
def watchlist(watchlist_store, market):
    return WatchlistService(watchlist_store, market)


@pytest.fixture
def user(portfolio_store):
    return portfolio_store.get_or_create_user("1001", "alice")
