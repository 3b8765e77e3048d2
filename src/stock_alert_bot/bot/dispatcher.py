"""Routes Telegram updates to handlers and guarantees one response per update."""
import asyncio
import logging
from collections.abc import Awaitable, Callable

from stock_alert_bot.bot import keyboards
from stock_alert_bot.bot.context import ChatContext
from stock_alert_bot.bot.handlers import (GeneralHandlers, MarketHandlers,
                                          PortfolioHandlers, RemovalHandlers,
                                          WatchHandlers)
from stock_alert_bot.bot.models import Update
from stock_alert_bot.bot.telegram_client import TelegramClient
from stock_alert_bot.exceptions import StockBotError
from stock_alert_bot.schemas import UserRecord
from stock_alert_bot.services.portfolio_engine import PortfolioEngine

logger = logging.getLogger(__name__)

Handler = Callable[[ChatContext, UserRecord, str], Awaitable[None]]

POLL_ERROR_BACKOFF_SECONDS = 5.0


def split_command(text: str) -> tuple[str, str]:
    """Split ``/cmd@bot args`` into (``cmd``, ``args``)."""
    head, _, rest = text.strip().partition(" ")
    command = head[1:].split("@", 1)[0].lower()
    return command, rest.strip()


class Dispatcher:
    """Maps commands and callback data to handlers.

    Callback routing tries exact matches first, then prefixes (longest first),
    so ``unwatch_all_confirm`` never reaches the ``unwatch_`` prefix handler.
    """

    def __init__(
        self,
        client: TelegramClient,
        engine: PortfolioEngine,
        general: GeneralHandlers,
        portfolio: PortfolioHandlers,
        removal: RemovalHandlers,
        market: MarketHandlers,
        watch: WatchHandlers,
    ) -> None:
        self._client = client
        self._engine = engine
        self._general = general
        self._removal = removal
        self._tasks: set[asyncio.Task] = set()

        self.commands: dict[str, Handler] = {
            "start": general.start,
            "help": general.help,
            "add": portfolio.add,
            "portfolio": portfolio.portfolio,
            "clear": portfolio.clear,
            "remove": removal.remove,
            "check": market.check,
            "news": market.news,
            "watch": watch.watch,
            "watchlist": watch.watchlist,
            "unwatch": watch.unwatch,
        }
        self.callbacks: dict[str, Handler] = {
            keyboards.REMOVE_CONFIRM: removal.confirm,
            keyboards.REMOVE_CANCEL: removal.cancel,
            keyboards.REMOVE_ALL_CONFIRM_1: removal.remove_all_confirm_1,
            keyboards.REMOVE_ALL_CONFIRM_2: removal.remove_all_confirm_2,
            keyboards.CLEAR_CONFIRM_1: portfolio.clear_confirm_1,
            keyboards.CLEAR_CONFIRM_2: portfolio.clear_confirm_2,
            keyboards.CLEAR_CANCEL: portfolio.clear_cancel,
            keyboards.UNWATCH_ALL_CONFIRM: watch.unwatch_all_confirm,
            keyboards.UNWATCH_ALL_EXECUTE: watch.unwatch_all_execute,
            keyboards.UNWATCH_CANCEL: watch.unwatch_cancel,
        }
        prefixes: dict[str, Handler] = {
            keyboards.REMOVE_SELECT: removal.select,
            keyboards.REMOVE_PARTIAL: removal.partial,
            keyboards.REMOVE_FULL: removal.full,
            keyboards.REMOVE_DIRECT: removal.direct,
            keyboards.UNWATCH: watch.unwatch_button,
        }
        self.prefixes: list[tuple[str, Handler]] = sorted(
            prefixes.items(), key=lambda item: len(item[0]), reverse=True
        )

    def route(self, ctx: ChatContext) -> tuple[Handler, str]:
        """Pick the handler for an update and the argument it receives."""
        if ctx.is_callback:
            data = ctx.text
            if data in self.callbacks:
                return self.callbacks[data], ""
            for prefix, handler in self.prefixes:
                if data.startswith(prefix):
                    return handler, data[len(prefix):]
            return self._general.unknown_callback, data
        if ctx.text.startswith("/"):
            command, args = split_command(ctx.text)
            return self.commands.get(command, self._general.unknown_command), args
        if self._removal.awaiting_quantity(ctx):
            return self._removal.quantity_text, ctx.text.strip()
        return self._general.text, ctx.text

    async def dispatch(self, update: Update) -> None:
        """Handle one update. Never raises."""
        ctx = ChatContext.from_update(self._client, update)
        if ctx is None:
            logger.debug("Ignoring update %s", update.update_id)
            return
        try:
            user = await self._engine.ensure_user(ctx.external_id, ctx.user.display_name)
            handler, arg = self.route(ctx)
            await handler(ctx, user, arg)
        except StockBotError as e:
            if e.user_facing:
                logger.debug("Denied update %s for %s: %s", update.update_id, ctx.external_id, e)
            else:
                logger.warning("Update %s failed for %s: %s", update.update_id, ctx.external_id, e)
            await self._report_failure(ctx, e)
        except Exception as e:  # pylint: disable=broad-except
            logger.exception("Unhandled error for update %s", update.update_id)
            await self._report_failure(ctx, e)
        finally:
            if ctx.is_callback and not ctx.answered:
                try:
                    await ctx.answer()
                except StockBotError as e:
                    logger.debug("Could not answer callback %s: %s", ctx.callback_id, e)

    async def _report_failure(self, ctx: ChatContext, exc: Exception) -> None:
        try:
            await ctx.fail(exc)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning("Could not report failure to %s: %s", ctx.external_id, e)

    def dispatch_in_background(self, update: Update) -> asyncio.Task:
        """Schedule an update so a slow handler never blocks other users."""
        task = asyncio.create_task(self.dispatch(update), name=f"update-{update.update_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for in-flight updates (used on shutdown)."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def poll_forever(self, timeout: int = 30) -> None:
        """Long-poll getUpdates and dispatch each update in the background."""
        offset: int | None = None
        logger.info("Polling Telegram for updates")
        while True:
            try:
                updates = await self._client.get_updates(offset=offset, timeout=timeout)
            except StockBotError as e:
                logger.warning("getUpdates failed: %s", e)
                await asyncio.sleep(POLL_ERROR_BACKOFF_SECONDS)
                continue
            except Exception:  # pylint: disable=broad-except
                logger.exception("getUpdates failed")
                await asyncio.sleep(POLL_ERROR_BACKOFF_SECONDS)
                continue
            for update in updates:
                offset = update.update_id + 1
                self.dispatch_in_background(update)
