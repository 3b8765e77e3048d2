"""/add, /portfolio and the two-step /clear."""
from stock_alert_bot.bot import keyboards, messages
from stock_alert_bot.bot.context import ChatContext
from stock_alert_bot.schemas import ClearResult, UserRecord
from stock_alert_bot.services.market_service import MarketService
from stock_alert_bot.services.portfolio_engine import PortfolioEngine
from stock_alert_bot.utils import parse_positive_decimal


class PortfolioHandlers:
    def __init__(self, engine: PortfolioEngine, market: MarketService) -> None:
        self._engine = engine
        self._market = market

    async def add(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        parts = arg.split()
        if len(parts) < 3:
            await ctx.reply(messages.ADD_USAGE)
            return
        symbol, raw_price, raw_quantity = parts[:3]
        price = parse_positive_decimal(raw_price, "Buy price")
        quantity = parse_positive_decimal(raw_quantity, "Quantity")
        position = await self._engine.add_position(user.id, symbol, price, quantity)
        await ctx.reply(messages.add_success(position, price, quantity))

    async def portfolio(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        positions = await self._engine.list_positions(user.id)
        if not positions:
            await ctx.reply(messages.PORTFOLIO_EMPTY)
            return
        summary = await self._market.value_portfolio(positions)
        await ctx.reply(messages.portfolio(summary))

    async def clear(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        positions = await self._engine.list_positions(user.id)
        if not positions:
            await ctx.reply(messages.clear_done(ClearResult(deleted_count=0)))
            return
        await ctx.reply(messages.clear_prompt(positions), keyboards.clear_keyboard(1))

    async def clear_confirm_1(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        await ctx.edit(messages.clear_second(), keyboards.clear_keyboard(2))

    async def clear_confirm_2(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        result = await self._engine.clear_all(user.id)
        await ctx.answer("Portfolio cleared")
        await ctx.edit(messages.clear_done(result))

    async def clear_cancel(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        await ctx.edit(messages.CLEAR_CANCELLED)
