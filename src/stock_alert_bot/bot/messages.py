"""Reply texts (Telegram HTML parse mode)."""
from decimal import Decimal
from html import escape

from stock_alert_bot.bot.keyboards import fmt_qty
from stock_alert_bot.exceptions import (InsufficientQuantityError,
                                        InvalidArgumentError, NotFoundError,
                                        RateLimitedError, SessionExpiredError,
                                        StockBotError)
from stock_alert_bot.schemas import (AlertEvent, ClearResult, NewsArticle,
                                     PortfolioSummary, PositionRecord, Quote,
                                     RemovalResult, StockCheck,
                                     WatchAlertEvent, WatchEntryRecord,
                                     WatchlistRow)

RULE = "━━━━━━━━━━━━━━━"
NEWS_DESCRIPTION_LIMIT = 150

HELP = (
    "🤖 <b>Stock Alert Bot</b>\n\n"
    "<b>Portfolio</b>\n"
    "/add SYMBOL PRICE QTY - add shares (e.g. <code>/add AAPL 180.5 10</code>)\n"
    "/remove - pick a holding to reduce or remove\n"
    "/remove SYMBOL QTY - remove some shares\n"
    "/remove SYMBOL all - remove a holding\n"
    "/remove all - remove every holding\n"
    "/portfolio - holdings at live prices\n"
    "/clear - clear the whole portfolio\n\n"
    "<b>Market</b>\n"
    "/check SYMBOL - quote and your P/L\n"
    "/news SYMBOL - latest news\n\n"
    "<b>Watchlist</b>\n"
    "/watch SYMBOL - alert once at ±3% and once at ±5%\n"
    "/watchlist - watched symbols\n"
    "/unwatch SYMBOL - stop watching\n\n"
    "🔔 Holdings are checked every few minutes; you get an alert when a price "
    "moves {threshold}% from your buy price."
)

ADD_USAGE = (
    "❌ <b>Invalid command format</b>\n\n"
    "Usage: <code>/add SYMBOL PRICE QTY</code>\n\n"
    "Examples:\n<code>/add AAPL 180.5 10</code>\n<code>/add TSLA 250.00 5</code>"
)
REMOVE_TIPS = (
    "💡 <b>Tips:</b>\n"
    "<code>/remove AAPL 5</code> - remove 5 AAPL shares\n"
    "<code>/remove AAPL all</code> - remove all AAPL\n"
    "<code>/remove all</code> - remove the whole portfolio"
)
REMOVE_USAGE = "❌ <b>Invalid quantity</b>\n\nUse <code>/remove AAPL 5</code> or <code>/remove AAPL all</code>"
CHECK_USAGE = "❌ Usage: <code>/check SYMBOL</code> (e.g. <code>/check AAPL</code>)"
NEWS_USAGE = "❌ Usage: <code>/news SYMBOL</code> (e.g. <code>/news AAPL</code>)"
NEWS_DISABLED = "📰 News is not available on this bot."
WATCH_USAGE = (
    "📝 <b>How to use /watch</b>\n\n"
    "<code>/watch AAPL</code>\n\n"
    "🔔 You get one alert at ±3% and one more at ±5% from the price when you started watching.\n\n"
    "Use /watchlist to see everything you watch."
)
UNWATCH_USAGE = "❌ Usage: <code>/unwatch SYMBOL</code>"
PORTFOLIO_EMPTY = "📊 <b>Your portfolio is empty</b>\n\nUse /add to add a stock."
WATCHLIST_EMPTY = "📝 <b>Your watchlist is empty</b>\n\n💡 Use <code>/watch AAPL</code> to add a stock."
REMOVE_CANCELLED = "❌ Removal cancelled."
CLEAR_CANCELLED = "❌ Clear cancelled. Your portfolio is unchanged."
UNWATCH_CANCELLED = "❌ Cancelled. Your watchlist is unchanged."
UNKNOWN_COMMAND = "🤔 Unknown command. Send /help to see what I can do."
FALLBACK_TEXT = "💡 Send /help to see the available commands."
GENERIC_FAILURE = "❌ Something went wrong. Please try again."
TRY_LATER = "⏳ The service is busy right now. Please try again later."
SESSION_EXPIRED = "⌛ This removal session has expired. Start again with /remove."


def money(value: Decimal | float) -> str:
    return f"${value:,.2f}"


def signed_money(value: Decimal | float) -> str:
    sign = "+" if value >= 0 else "-"
    return f"{sign}${abs(value):,.2f}"


def signed_pct(value: Decimal | float) -> str:
    return f"{'+' if value >= 0 else ''}{value:.2f}%"


def trend(value: Decimal | float) -> str:
    return "📈" if value >= 0 else "📉"


def help_text(threshold: Decimal) -> str:
    return HELP.format(threshold=fmt_qty(threshold))


def start_text(name: str, threshold: Decimal) -> str:
    return f"👋 Hi {escape(name)}!\n\n" + help_text(threshold)


def error_text(exc: Exception) -> str:
    """One-line reply for a failed request."""
    if isinstance(exc, SessionExpiredError):
        return SESSION_EXPIRED
    if isinstance(exc, InsufficientQuantityError):
        return (
            "❌ <b>Not enough shares</b>\n\n"
            f"You hold {fmt_qty(exc.available)} {escape(exc.symbol)} "
            f"but asked to remove {fmt_qty(exc.requested)}."
        )
    if isinstance(exc, NotFoundError):
        if exc.symbol:
            return f"❌ {escape(exc.symbol)} was not found.\n\nUse /portfolio to see your holdings."
        return f"❌ {escape(exc.message)}"
    if isinstance(exc, InvalidArgumentError):
        return f"❌ {escape(exc.message)}"
    if isinstance(exc, RateLimitedError):
        return "⏳ The market data API rate limit was hit. Please try again later."
    if isinstance(exc, StockBotError):
        return TRY_LATER
    return GENERIC_FAILURE


def add_success(position: PositionRecord, price: Decimal, quantity: Decimal) -> str:
    return (
        "✅ <b>Stock added!</b>\n\n"
        f"📊 Symbol: {position.symbol}\n"
        f"💰 Buy price: {money(price)}\n"
        f"📦 Quantity: {fmt_qty(quantity)} shares\n"
        f"💵 Value: {money(price * quantity)}\n\n"
        f"Now holding {fmt_qty(position.quantity)} {position.symbol} @ {money(position.average_buy_price)}\n"
        "Use /portfolio to see your whole portfolio."
    )


def portfolio(summary: PortfolioSummary) -> str:
    if not summary.rows:
        return PORTFOLIO_EMPTY
    lines = ["📊 <b>Your portfolio</b>", ""]
    for index, row in enumerate(summary.rows, start=1):
        position = row.position
        lines.append(f"<b>{index}. {position.symbol}</b>")
        lines.append(f"   Buy: {money(position.average_buy_price)} × {fmt_qty(position.quantity)}")
        price_note = "" if row.priced else " (quote unavailable)"
        lines.append(f"   Now: {money(row.current_price)}{price_note}")
        lines.append(
            f"   {trend(row.profit_loss)} {signed_money(row.profit_loss)} "
            f"({signed_pct(row.profit_loss_percent)})"
        )
        lines.append("")
    lines.append(RULE)
    lines.append(f"💼 Invested: {money(summary.total_invested)}")
    lines.append(f"💰 Current value: {money(summary.total_value)}")
    lines.append(
        f"{trend(summary.total_profit_loss)} <b>Total P/L: "
        f"{signed_money(summary.total_profit_loss)} "
        f"({signed_pct(summary.total_profit_loss_percent)})</b>"
    )
    return "\n".join(lines)


def _opt_money(value: float | None) -> str:
    return money(value) if value is not None else "n/a"


def stock_check(check: StockCheck) -> str:
    quote = check.quote
    lines = [
        f"📊 <b>{quote.symbol}</b>",
        "",
        f"💰 Price: {money(quote.current_price)}",
        f"📈 Day high: {_opt_money(quote.high)}",
        f"📉 Day low: {_opt_money(quote.low)}",
        f"🔓 Open: {_opt_money(quote.open)}",
        f"🔒 Previous close: {_opt_money(quote.previous_close)}",
    ]
    if quote.change is not None and quote.percent_change is not None:
        lines.append("")
        lines.append(
            f"{trend(quote.change)} Change: {signed_money(quote.change)} "
            f"({signed_pct(quote.percent_change)})"
        )
    if check.position is not None:
        pl = check.profit_loss
        lines.extend(
            [
                "",
                RULE,
                "📦 <b>In your portfolio:</b>",
                f"   Buy price: {money(check.position.average_buy_price)}",
                f"   Quantity: {fmt_qty(check.position.quantity)} shares",
                f"   {'💚' if pl >= 0 else '❤️'} P/L: {signed_money(pl)} "
                f"({signed_pct(check.profit_loss_percent)})",
            ]
        )
    return "\n".join(lines)


def news(symbol: str, articles: list[NewsArticle]) -> str:
    if not articles:
        return f"📰 No news found for {symbol}."
    lines = [f"📰 <b>Latest news: {symbol}</b>", ""]
    for index, article in enumerate(articles, start=1):
        lines.append(f"<b>{index}. {escape(article.title)}</b>")
        if article.description:
            description = article.description
            if len(description) > NEWS_DESCRIPTION_LIMIT:
                description = description[:NEWS_DESCRIPTION_LIMIT] + "..."
            lines.append(escape(description))
        if article.sentiment is not None:
            mood = "📈" if article.sentiment > 0 else "📉" if article.sentiment < 0 else "➡️"
            lines.append(f"{mood} Sentiment: {article.sentiment:.2f}")
        lines.append(f'🔗 <a href="{escape(article.url, quote=True)}">Read more</a>')
        if article.published_at:
            lines.append(f"📅 {article.published_at:%Y-%m-%d %H:%M} UTC")
        lines.append("")
    return "\n".join(lines).rstrip()


def remove_select_prompt() -> str:
    return "📊 <b>Choose a stock to reduce or remove</b>\n\n" + REMOVE_TIPS


def remove_mode_prompt(symbol: str, quantity: Decimal, average_price: Decimal) -> str:
    return (
        f"🎯 <b>{symbol}</b>\n\n"
        f"📊 Quantity: {fmt_qty(quantity)} shares\n"
        f"💰 Average price: {money(average_price)}\n"
        f"💵 Value: {money(quantity * average_price)}\n\n"
        "What would you like to do?"
    )


def remove_quantity_prompt(symbol: str, quantity: Decimal) -> str:
    return (
        f"➖ <b>Reduce {symbol}</b>\n\n"
        f"📊 You hold {fmt_qty(quantity)} shares\n\n"
        "Type how many shares to remove (numbers only, e.g. 5):"
    )


def remove_confirm(symbol: str, quantity: Decimal, average_price: Decimal, *, full: bool) -> str:
    if full:
        head = "⚠️ <b>Confirm removal</b>"
        detail = f"🗑️ Remove all: {fmt_qty(quantity)} shares"
    else:
        head = "⚠️ <b>Confirm reduction</b>"
        detail = f"➖ Remove: {fmt_qty(quantity)} shares"
    return (
        f"{head}\n\n📊 {symbol}\n{detail}\n"
        f"💰 Average price: {money(average_price)} (unchanged)\n\n"
        "⚠️ This cannot be undone."
    )


def removal_done(result: RemovalResult) -> str:
    if result.fully_removed:
        return (
            "✅ <b>Stock removed</b>\n\n"
            f"🗑️ {result.symbol} ({fmt_qty(result.removed_quantity)} shares) "
            "is no longer in your portfolio.\n\nUse /portfolio to see your portfolio."
        )
    return (
        "✅ <b>Shares removed</b>\n\n"
        f"📊 {result.symbol}\n"
        f"➖ Removed: {fmt_qty(result.removed_quantity)} shares\n"
        f"📦 Remaining: {fmt_qty(result.remaining_quantity)} shares\n"
        f"💰 Average price: {money(result.average_buy_price)}\n"
        f"💵 Remaining value: {money(result.remaining_value)}"
    )


def _holding_lines(positions: list[PositionRecord]) -> str:
    return "\n".join(
        f"• {p.symbol}: {fmt_qty(p.quantity)} shares @ {money(p.average_buy_price)}"
        for p in positions
    )


def remove_all_prompt(positions: list[PositionRecord]) -> str:
    total = sum((p.invested for p in positions), Decimal("0"))
    return (
        "⚠️ <b>Remove the whole portfolio</b>\n\n"
        f"You are about to remove <b>{len(positions)} holdings</b>:\n\n"
        f"{_holding_lines(positions)}\n\n"
        f"💰 Total cost: {money(total)}\n\n"
        "⚠️ <b>Warning:</b> this cannot be undone!"
    )


def remove_all_second(count: int) -> str:
    return (
        "🚨 <b>Last confirmation</b>\n\n"
        f"All {count} holdings will be deleted. Are you sure?"
    )


def remove_all_done(results: list[RemovalResult]) -> str:
    if not results:
        return "📊 Your portfolio was already empty."
    symbols = ", ".join(r.symbol for r in results)
    return (
        "✅ <b>Portfolio removed</b>\n\n"
        f"🗑️ Removed {len(results)} holdings: {symbols}\n\n"
        "Use /add to start again."
    )


def clear_prompt(positions: list[PositionRecord]) -> str:
    return (
        "⚠️ <b>Clear portfolio</b>\n\n"
        f"This deletes all <b>{len(positions)}</b> holdings:\n\n"
        f"{_holding_lines(positions)}\n\n"
        "Do you want to continue?"
    )


def clear_second() -> str:
    return "🚨 <b>Are you absolutely sure?</b>\n\nEvery holding will be deleted and cannot be restored."


def clear_done(result: ClearResult) -> str:
    if result.already_empty:
        return "📊 Your portfolio was already empty."
    return (
        "✅ <b>Portfolio cleared</b>\n\n"
        f"🗑️ Deleted holdings: {result.deleted_count}\n\n"
        "Use /add to start again."
    )


def watch_added(entry: WatchEntryRecord, quote: Quote) -> str:
    change = quote.change or 0
    pct = quote.percent_change or 0
    return (
        "✅ <b>Added to your watchlist!</b>\n\n"
        f"{trend(pct)} <b>{entry.symbol}</b>\n"
        f"💰 Price: <b>{money(entry.base_price)}</b>\n"
        f"📊 Today: {signed_money(change)} ({signed_pct(pct)})\n\n"
        "🔔 <b>Alerts:</b>\n"
        "• at ±3%: one alert\n"
        "• at ±5%: one more alert\n\n"
        "Use /watchlist to see everything you watch."
    )


def watchlist(rows: list[WatchlistRow]) -> str:
    if not rows:
        return WATCHLIST_EMPTY
    lines = ["📝 <b>Your watchlist</b>", ""]
    for row in rows:
        entry = row.entry
        lines.append(f"{trend(row.percent_change)} <b>{entry.symbol}</b>")
        lines.append(f"   Start: {money(entry.base_price)}")
        lines.append(f"   Now: {money(row.current_price)}")
        lines.append(f"   Change: {signed_pct(row.percent_change)}")
        if entry.alert5_sent:
            lines.append("   🔔 Alerted: ±3%, ±5%")
        elif entry.alert3_sent:
            lines.append("   🔔 Alerted: ±3%")
        lines.append("")
    lines.append(f"📊 Total: {len(rows)}")
    return "\n".join(lines)


def unwatched(symbol: str, removed: bool) -> str:
    if removed:
        return f"✅ {symbol} removed from your watchlist."
    return f"❌ {symbol} is not in your watchlist."


def unwatch_all_prompt(count: int) -> str:
    return f"⚠️ <b>Unwatch everything?</b>\n\nAll {count} watched symbols will be removed."


def unwatch_all_done(count: int) -> str:
    if not count:
        return "📝 Your watchlist was already empty."
    return f"✅ Removed {count} symbols from your watchlist."


def alert(event: AlertEvent) -> str:
    change = event.percent_change_from_buy
    warning = " ⚠️" if abs(change) >= 5 else ""
    direction = "above" if change >= 0 else "below"
    return (
        f"⚡ <b>{event.symbol} Alert</b>{warning}\n\n"
        f"💰 Price: {money(event.current_price)}\n"
        f"📊 Buy price: {money(event.average_buy_price)}\n"
        f"{trend(change)} Change: {signed_pct(change)}\n"
        f"📦 Quantity: {fmt_qty(event.quantity)} shares\n\n"
        f"Now {abs(change):.1f}% {direction} your buy price."
    )


def watch_alert(event: WatchAlertEvent) -> str:
    change = event.percent_change
    direction = "up" if change >= 0 else "down"
    return (
        f"🔔 <b>{event.symbol} moved ±{fmt_qty(event.level)}%</b>\n\n"
        f"💰 Price: {money(event.current_price)}\n"
        f"📍 Watched from: {money(event.base_price)}\n"
        f"{trend(change)} {direction} {signed_pct(change)}"
    )
