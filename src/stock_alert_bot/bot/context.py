"""Per-update reply context: who asked, where to answer, and how."""
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from stock_alert_bot.bot import messages
from stock_alert_bot.bot.models import InlineKeyboard, TelegramUser, Update
from stock_alert_bot.bot.telegram_client import TelegramClient
from stock_alert_bot.exceptions import StockBotError

logger = logging.getLogger(__name__)


@dataclass
class ChatContext:
    """Wraps one incoming message or callback query.

    For callbacks, ``respond`` edits the message that carried the button;
    for messages it sends a new one.
    """

    client: TelegramClient
    chat_id: int
    user: TelegramUser
    text: str = ""
    message_id: int | None = None
    callback_id: str | None = None
    answered: bool = False
    responded: bool = False

    @classmethod
    def from_update(cls, client: TelegramClient, update: Update) -> "ChatContext | None":
        """Build a context, or None for updates the bot does not handle."""
        if update.callback_query is not None:
            query = update.callback_query
            if query.message is None:
                return None
            return cls(
                client=client,
                chat_id=query.message.chat.id,
                user=query.from_user,
                text=query.data or "",
                message_id=query.message.message_id,
                callback_id=query.id,
            )
        message = update.message
        if message is None or message.from_user is None or message.text is None:
            return None
        return cls(client=client, chat_id=message.chat.id, user=message.from_user, text=message.text)

    @property
    def external_id(self) -> str:
        return str(self.user.id)

    @property
    def is_callback(self) -> bool:
        return self.callback_id is not None

    async def reply(
        self,
        text: str,
        keyboard: InlineKeyboard | None = None,
        *,
        preview: bool = False,
    ) -> None:
        await self.client.send_message(
            self.chat_id, text, reply_markup=keyboard, disable_web_page_preview=not preview
        )
        self.responded = True

    async def edit(self, text: str, keyboard: InlineKeyboard | None = None) -> None:
        if self.message_id is None:
            await self.reply(text, keyboard)
            return
        await self.client.edit_message_text(self.chat_id, self.message_id, text, reply_markup=keyboard)
        self.responded = True

    async def respond(self, text: str, keyboard: InlineKeyboard | None = None) -> None:
        if self.is_callback:
            await self.edit(text, keyboard)
        else:
            await self.reply(text, keyboard)

    async def answer(self, text: str | None = None, *, show_alert: bool = False) -> None:
        """Answer the callback query once; no-op for plain messages."""
        if not self.is_callback or self.answered:
            return
        self.answered = True
        await self.client.answer_callback_query(self.callback_id, text, show_alert=show_alert)

    async def fail(self, exc: Exception) -> None:
        """Report a failed request to the user with exactly one response."""
        text = messages.error_text(exc)
        short = exc.message if isinstance(exc, StockBotError) and exc.user_facing else None
        if self.responded:
            # The handler already replied; only release a pending callback spinner.
            if self.is_callback:
                await self.answer(short)
            return
        if self.is_callback:
            await self.answer(short)
            await self.edit(text)
        else:
            await self.reply(text)

    @asynccontextmanager
    async def loading(self, text: str) -> AsyncIterator[None]:
        """Show a transient "working on it" message while the block runs."""
        notice = await self.client.send_message(self.chat_id, text)
        try:
            yield
        finally:
            try:
                await self.client.delete_message(self.chat_id, notice.message_id)
            except StockBotError as e:
                logger.debug("Could not delete loading message: %s", e)
