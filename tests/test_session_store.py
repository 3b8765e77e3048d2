from decimal import Decimal

from stock_alert_bot.services import InMemorySessionStore, RemovalSession


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def make_session(symbol: str = "AAPL") -> RemovalSession:
    return RemovalSession(
        user_id=1, symbol=symbol, current_quantity=Decimal("5"), average_price=Decimal("10")
    )


class TestInMemorySessionStore:
    def test_get_set_delete(self):
        store = InMemorySessionStore()
        session = make_session()

        store.set("a", session)
        assert store.get("a") is session
        store.delete("a")
        assert store.get("a") is None
        store.delete("a")

    def test_expires_after_ttl(self):
        clock = FakeClock()
        store = InMemorySessionStore(ttl_seconds=600, clock=clock)
        store.set("a", make_session())

        clock.now += 599
        assert store.get("a") is not None
        clock.now += 1
        assert store.get("a") is None
        assert len(store) == 0

    def test_write_refreshes_ttl(self):
        clock = FakeClock()
        store = InMemorySessionStore(ttl_seconds=600, clock=clock)
        session = make_session()
        store.set("a", session)
        clock.now += 500
        store.set("a", session)
        clock.now += 500

        assert store.get("a") is session

    def test_reap(self):
        clock = FakeClock()
        store = InMemorySessionStore(ttl_seconds=10, clock=clock)
        store.set("a", make_session("AAPL"))
        store.set("b", make_session("MSFT"))
        clock.now += 5
        store.set("c", make_session("TSLA"))
        clock.now += 6

        assert store.reap() == 2
        assert len(store) == 1
        assert store.get("c").symbol == "TSLA"
