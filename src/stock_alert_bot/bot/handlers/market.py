"""/check and /news."""
from stock_alert_bot.bot import messages
from stock_alert_bot.bot.context import ChatContext
from stock_alert_bot.providers.core.utils import normalize_stock_symbol
from stock_alert_bot.schemas import UserRecord
from stock_alert_bot.services.market_service import MarketService
from stock_alert_bot.services.portfolio_engine import PortfolioEngine


class MarketHandlers:
    def __init__(self, engine: PortfolioEngine, market: MarketService, news_limit: int = 5) -> None:
        self._engine = engine
        self._market = market
        self._news_limit = news_limit

    async def check(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        parts = arg.split()
        if not parts:
            await ctx.reply(messages.CHECK_USAGE)
            return
        symbol = normalize_stock_symbol(parts[0])
        position = await self._engine.get_position(user.id, symbol)
        check = await self._market.check(symbol, position)
        await ctx.reply(messages.stock_check(check))

    async def news(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        parts = arg.split()
        if not parts:
            await ctx.reply(messages.NEWS_USAGE)
            return
        if not self._market.news_enabled:
            await ctx.reply(messages.NEWS_DISABLED)
            return
        symbol = normalize_stock_symbol(parts[0])
        async with ctx.loading(f"📰 Looking for {symbol} news..."):
            articles = await self._market.get_news(symbol, self._news_limit)
        await ctx.reply(messages.news(symbol, articles), preview=True)
