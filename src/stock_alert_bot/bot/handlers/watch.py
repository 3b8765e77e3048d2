"""/watch, /watchlist, /unwatch and the unwatch buttons."""
from stock_alert_bot.bot import keyboards, messages
from stock_alert_bot.bot.context import ChatContext
from stock_alert_bot.providers.core.utils import normalize_stock_symbol
from stock_alert_bot.schemas import UserRecord
from stock_alert_bot.services.watchlist import WatchlistService


class WatchHandlers:
    def __init__(self, watchlist: WatchlistService) -> None:
        self._watchlist = watchlist

    async def watch(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        parts = arg.split()
        if not parts:
            await ctx.reply(messages.WATCH_USAGE)
            return
        entry, quote = await self._watchlist.watch(user.id, parts[0])
        await ctx.reply(messages.watch_added(entry, quote))

    async def watchlist(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        entries = await self._watchlist.list_entries(user.id)
        if not entries:
            await ctx.reply(messages.WATCHLIST_EMPTY)
            return
        async with ctx.loading("⏳ Loading your watchlist..."):
            rows = await self._watchlist.list_rows(user.id)
        await ctx.reply(messages.watchlist(rows), keyboards.watchlist_keyboard([r.entry for r in rows]))

    async def unwatch(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        parts = arg.split()
        if not parts:
            await ctx.reply(messages.UNWATCH_USAGE)
            return
        symbol = normalize_stock_symbol(parts[0])
        removed = await self._watchlist.unwatch(user.id, symbol)
        await ctx.reply(messages.unwatched(symbol, removed))

    async def unwatch_button(self, ctx: ChatContext, user: UserRecord, symbol: str) -> None:
        symbol = normalize_stock_symbol(symbol)
        removed = await self._watchlist.unwatch(user.id, symbol)
        await ctx.answer(f"{symbol} removed" if removed else None)
        await ctx.edit(messages.unwatched(symbol, removed))

    async def unwatch_all_confirm(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        entries = await self._watchlist.list_entries(user.id)
        if not entries:
            await ctx.edit(messages.unwatch_all_done(0))
            return
        await ctx.edit(messages.unwatch_all_prompt(len(entries)), keyboards.unwatch_all_keyboard())

    async def unwatch_all_execute(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        count = await self._watchlist.clear(user.id)
        await ctx.edit(messages.unwatch_all_done(count))

    async def unwatch_cancel(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        await ctx.edit(messages.UNWATCH_CANCELLED)
