"""Inline keyboards and the callback data they carry."""
from decimal import Decimal

from stock_alert_bot.bot.models import InlineButton, InlineKeyboard
from stock_alert_bot.schemas import PositionRecord, WatchEntryRecord

REMOVE_SELECT = "remove_select_"
REMOVE_PARTIAL = "remove_partial_"
REMOVE_FULL = "remove_full_"
REMOVE_DIRECT = "remove_direct_"
REMOVE_CONFIRM = "remove_confirm"
REMOVE_CANCEL = "remove_cancel"
REMOVE_ALL_CONFIRM_1 = "remove_all_confirm_1"
REMOVE_ALL_CONFIRM_2 = "remove_all_confirm_2"
CLEAR_CONFIRM_1 = "clear_confirm_1"
CLEAR_CONFIRM_2 = "clear_confirm_2"
CLEAR_CANCEL = "clear_cancel"
UNWATCH = "unwatch_"
UNWATCH_ALL_CONFIRM = "unwatch_all_confirm"
UNWATCH_ALL_EXECUTE = "unwatch_all_execute"
UNWATCH_CANCEL = "unwatch_cancel"


def fmt_qty(quantity: Decimal) -> str:
    """Render a quantity without trailing zeros or exponent (15.0000 -> 15)."""
    return f"{quantity.normalize():f}"


def _keyboard(*rows: tuple[str, str]) -> InlineKeyboard:
    return InlineKeyboard(
        inline_keyboard=[[InlineButton(text=text, callback_data=data)] for text, data in rows]
    )


def remove_select_keyboard(positions: list[PositionRecord]) -> InlineKeyboard:
    rows = [
        (
            f"{p.symbol} - {fmt_qty(p.quantity)} shares @ ${p.average_buy_price:,.2f}",
            f"{REMOVE_SELECT}{p.symbol}",
        )
        for p in positions
    ]
    return _keyboard(*rows, ("❌ Cancel", REMOVE_CANCEL))


def remove_mode_keyboard(symbol: str) -> InlineKeyboard:
    return _keyboard(
        ("➖ Remove some", f"{REMOVE_PARTIAL}{symbol}"),
        ("🗑️ Remove all", f"{REMOVE_FULL}{symbol}"),
        ("❌ Cancel", REMOVE_CANCEL),
    )


def remove_confirm_keyboard() -> InlineKeyboard:
    return _keyboard(("✅ Confirm", REMOVE_CONFIRM), ("❌ Cancel", REMOVE_CANCEL))


def remove_direct_keyboard(symbol: str, quantity: Decimal) -> InlineKeyboard:
    return _keyboard(
        ("✅ Confirm", f"{REMOVE_DIRECT}{symbol}_{fmt_qty(quantity)}"),
        ("❌ Cancel", REMOVE_CANCEL),
    )


def parse_remove_direct(payload: str) -> tuple[str, str]:
    """Split the ``<SYMBOL>_<QTY>`` part of a direct-removal callback."""
    symbol, _, quantity = payload.rpartition("_")
    return symbol, quantity


def remove_all_keyboard(step: int) -> InlineKeyboard:
    if step == 1:
        return _keyboard(("⚠️ Clear portfolio", REMOVE_ALL_CONFIRM_1), ("❌ Cancel", REMOVE_CANCEL))
    return _keyboard(("🗑️ Yes, remove everything", REMOVE_ALL_CONFIRM_2), ("❌ Cancel", REMOVE_CANCEL))


def clear_keyboard(step: int) -> InlineKeyboard:
    if step == 1:
        return _keyboard(("⚠️ Clear portfolio", CLEAR_CONFIRM_1), ("❌ Cancel", CLEAR_CANCEL))
    return _keyboard(("🗑️ Confirm again - clear portfolio", CLEAR_CONFIRM_2), ("❌ Cancel", CLEAR_CANCEL))


def watchlist_keyboard(entries: list[WatchEntryRecord]) -> InlineKeyboard:
    rows = [(f"❌ Unwatch {e.symbol}", f"{UNWATCH}{e.symbol}") for e in entries]
    if len(entries) > 1:
        rows.append(("🗑️ Unwatch all", UNWATCH_ALL_CONFIRM))
    return _keyboard(*rows)


def unwatch_all_keyboard() -> InlineKeyboard:
    return _keyboard(("✅ Yes, unwatch all", UNWATCH_ALL_EXECUTE), ("❌ Cancel", UNWATCH_CANCEL))
