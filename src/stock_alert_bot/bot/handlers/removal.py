"""/remove in all its forms: interactive dialog, direct confirmation, remove-all."""
from stock_alert_bot.bot import keyboards, messages
from stock_alert_bot.bot.context import ChatContext
from stock_alert_bot.exceptions import (InsufficientQuantityError,
                                        InvalidArgumentError, NotFoundError)
from stock_alert_bot.providers.core.utils import normalize_stock_symbol
from stock_alert_bot.schemas import UserRecord
from stock_alert_bot.services.portfolio_engine import (PortfolioEngine,
                                                      quantize_amount)
from stock_alert_bot.services.removal_dialog import RemovalDialog
from stock_alert_bot.utils import parse_positive_decimal


class RemovalHandlers:
    def __init__(self, engine: PortfolioEngine, dialog: RemovalDialog) -> None:
        self._engine = engine
        self._dialog = dialog

    def awaiting_quantity(self, ctx: ChatContext) -> bool:
        return self._dialog.is_awaiting_quantity(ctx.external_id)

    async def remove(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        """Route ``/remove``, ``/remove all``, ``/remove SYM`` and ``/remove SYM QTY|all``."""
        parts = arg.split()
        if not parts:
            await self._show_select(ctx, user)
        elif len(parts) == 1 and parts[0].lower() == "all":
            await self._show_remove_all(ctx, user)
        elif len(parts) == 1:
            session = await self._dialog.select(ctx.external_id, user.id, parts[0])
            await ctx.reply(
                messages.remove_mode_prompt(session.symbol, session.current_quantity, session.average_price),
                keyboards.remove_mode_keyboard(session.symbol),
            )
        else:
            await self._show_direct(ctx, user, parts[0], parts[1])

    async def _show_select(self, ctx: ChatContext, user: UserRecord) -> None:
        positions = await self._engine.list_positions(user.id)
        if not positions:
            await ctx.reply(messages.PORTFOLIO_EMPTY)
            return
        await ctx.reply(messages.remove_select_prompt(), keyboards.remove_select_keyboard(positions))

    async def _show_remove_all(self, ctx: ChatContext, user: UserRecord) -> None:
        positions = await self._engine.list_positions(user.id)
        if not positions:
            await ctx.reply(messages.PORTFOLIO_EMPTY)
            return
        await ctx.reply(messages.remove_all_prompt(positions), keyboards.remove_all_keyboard(1))

    async def _show_direct(self, ctx: ChatContext, user: UserRecord, raw_symbol: str, raw_quantity: str) -> None:
        symbol = normalize_stock_symbol(raw_symbol)
        position = await self._engine.get_position(user.id, symbol)
        if position is None:
            raise NotFoundError(f"{symbol} is not in your portfolio", symbol=symbol)
        full = raw_quantity.lower() == "all"
        if full:
            quantity = position.quantity
        else:
            try:
                quantity = quantize_amount(parse_positive_decimal(raw_quantity, "Quantity"), "Quantity")
            except InvalidArgumentError:
                await ctx.reply(messages.REMOVE_USAGE)
                return
            if quantity > position.quantity:
                raise InsufficientQuantityError(symbol, quantity, position.quantity)
            full = quantity == position.quantity
        await ctx.reply(
            messages.remove_confirm(symbol, quantity, position.average_buy_price, full=full),
            keyboards.remove_direct_keyboard(symbol, quantity),
        )

    async def select(self, ctx: ChatContext, user: UserRecord, symbol: str) -> None:
        session = await self._dialog.select(ctx.external_id, user.id, symbol)
        await ctx.edit(
            messages.remove_mode_prompt(session.symbol, session.current_quantity, session.average_price),
            keyboards.remove_mode_keyboard(session.symbol),
        )

    async def partial(self, ctx: ChatContext, user: UserRecord, symbol: str) -> None:
        session = self._dialog.choose_partial(ctx.external_id, symbol)
        await ctx.edit(messages.remove_quantity_prompt(session.symbol, session.current_quantity))

    async def full(self, ctx: ChatContext, user: UserRecord, symbol: str) -> None:
        session = self._dialog.choose_full(ctx.external_id, symbol)
        await ctx.edit(
            messages.remove_confirm(
                session.symbol, session.remove_quantity, session.average_price, full=True
            ),
            keyboards.remove_confirm_keyboard(),
        )

    async def quantity_text(self, ctx: ChatContext, user: UserRecord, text: str) -> None:
        """Typed quantity for a dialog awaiting one; bad input re-prompts and keeps the dialog."""
        try:
            session = self._dialog.submit_quantity(ctx.external_id, text)
        except (InvalidArgumentError, InsufficientQuantityError) as e:
            current = self._dialog.current(ctx.external_id)
            prompt = messages.error_text(e)
            if current is not None:
                prompt += "\n\n" + messages.remove_quantity_prompt(current.symbol, current.current_quantity)
            await ctx.reply(prompt)
            return
        await ctx.reply(
            messages.remove_confirm(
                session.symbol,
                session.remove_quantity,
                session.average_price,
                full=session.remove_quantity == session.current_quantity,
            ),
            keyboards.remove_confirm_keyboard(),
        )

    async def confirm(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        result = await self._dialog.confirm(ctx.external_id)
        await ctx.answer("Done")
        await ctx.edit(messages.removal_done(result))

    async def cancel(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        self._dialog.cancel(ctx.external_id)
        await ctx.edit(messages.REMOVE_CANCELLED)

    async def direct(self, ctx: ChatContext, user: UserRecord, payload: str) -> None:
        symbol, raw_quantity = keyboards.parse_remove_direct(payload)
        quantity = parse_positive_decimal(raw_quantity, "Quantity")
        result = await self._engine.remove_quantity(user.id, symbol, quantity)
        await ctx.answer("Done")
        await ctx.edit(messages.removal_done(result))

    async def remove_all_confirm_1(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        positions = await self._engine.list_positions(user.id)
        if not positions:
            await ctx.edit(messages.remove_all_done([]))
            return
        await ctx.edit(messages.remove_all_second(len(positions)), keyboards.remove_all_keyboard(2))

    async def remove_all_confirm_2(self, ctx: ChatContext, user: UserRecord, arg: str) -> None:
        results = await self._engine.remove_all_positions(user.id)
        await ctx.answer("Portfolio removed")
        await ctx.edit(messages.remove_all_done(results))
