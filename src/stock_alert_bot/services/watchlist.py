"""Watchlist: symbols tracked without holding them, with one-shot move alerts."""
import asyncio
import logging

from stock_alert_bot.providers.core.utils import normalize_stock_symbol
from stock_alert_bot.schemas import Quote, WatchEntryRecord, WatchlistRow
from stock_alert_bot.services.market_service import (QUIET_QUOTE_ERRORS,
                                                     MarketService)
from stock_alert_bot.services.protocols import WatchlistStore

logger = logging.getLogger(__name__)


class WatchlistService:
    def __init__(self, store: WatchlistStore, market: MarketService) -> None:
        self._store = store
        self._market = market

    async def watch(self, user_id: int, symbol: str) -> tuple[WatchEntryRecord, Quote]:
        """Watch a symbol from its current price; re-watching resets base price and flags.

        Raises:
            InvalidArgumentError: Malformed symbol.
            NotFoundError: The quote provider does not know the symbol.
        """
        sym = normalize_stock_symbol(symbol)
        quote = await self._market.get_quote(sym)
        entry = await asyncio.to_thread(self._store.upsert_watch, user_id, sym, quote.price)
        return entry, quote

    async def unwatch(self, user_id: int, symbol: str) -> bool:
        sym = normalize_stock_symbol(symbol)
        return await asyncio.to_thread(self._store.delete_watch, user_id, sym)

    async def list_entries(self, user_id: int) -> list[WatchEntryRecord]:
        return await asyncio.to_thread(self._store.list_watchlist, user_id)

    async def list_rows(self, user_id: int) -> list[WatchlistRow]:
        """Watch entries with live prices; an entry whose quote fails shows its base price."""
        entries = await self.list_entries(user_id)
        quotes = await self._market.get_quotes([e.symbol for e in entries])
        rows = []
        for entry in entries:
            quote = quotes[entry.symbol]
            if isinstance(quote, Quote):
                rows.append(WatchlistRow(entry=entry, current_price=quote.price))
                continue
            if not isinstance(quote, QUIET_QUOTE_ERRORS):
                logger.warning("Quote failed for watched %s: %s", entry.symbol, quote)
            rows.append(WatchlistRow(entry=entry, current_price=entry.base_price))
        return rows

    async def clear(self, user_id: int) -> int:
        """Unwatch everything; returns how many entries were removed."""
        return await asyncio.to_thread(self._store.delete_watchlist, user_id)
