"""/start, /help and fallbacks."""
from decimal import Decimal

from stock_alert_bot.bot import messages
from stock_alert_bot.bot.context import ChatContext
from stock_alert_bot.schemas import UserRecord


class GeneralHandlers:
    def __init__(self, threshold: Decimal) -> None:
        self._threshold = threshold

    async def start(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        await ctx.reply(messages.start_text(user.display_name or ctx.user.display_name, self._threshold))

    async def help(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        await ctx.reply(messages.help_text(self._threshold))

    async def unknown_command(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        await ctx.reply(messages.UNKNOWN_COMMAND)

    async def unknown_callback(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        await ctx.answer("This button is no longer active")
        await ctx.edit(messages.UNKNOWN_COMMAND)

    async def text(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        await ctx.reply(messages.FALLBACK_TEXT)
