"""Ephemeral per-user state for the interactive removal dialog."""
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Protocol


class RemovalState(str, Enum):
    SYMBOL_SELECTED = "symbol_selected"
    AWAITING_QUANTITY = "awaiting_quantity"
    CONFIRMING = "confirming"


@dataclass
class RemovalSession:
    """Snapshot of the position being removed plus the dialog state."""

    user_id: int
    symbol: str
    current_quantity: Decimal
    average_price: Decimal
    state: RemovalState = RemovalState.SYMBOL_SELECTED
    remove_quantity: Decimal | None = None

    @property
    def waiting_for_quantity(self) -> bool:
        return self.state is RemovalState.AWAITING_QUANTITY


class SessionStore(Protocol):
    """Key-value store of removal sessions keyed by platform user id."""

    def get(self, key: str) -> RemovalSession | None:
        ...

    def set(self, key: str, session: RemovalSession) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class InMemorySessionStore:
    """Process-local SessionStore with a fixed idle TTL.

    Entries older than ``ttl_seconds`` since their last write read as absent
    and are dropped lazily on access.
    """

    def __init__(
        self,
        ttl_seconds: float = 600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[float, RemovalSession]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> RemovalSession | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, session = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return session

    def set(self, key: str, session: RemovalSession) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + self._ttl, session)
            self._reap_locked()

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def reap(self) -> int:
        """Drop expired sessions; returns how many were removed."""
        with self._lock:
            return self._reap_locked()

    def _reap_locked(self) -> int:
        now = self._clock()
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)
