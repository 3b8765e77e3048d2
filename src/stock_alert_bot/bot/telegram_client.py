"""Telegram Bot API client over httpx."""
import logging
from typing import Any

import httpx

from stock_alert_bot.bot.models import InlineKeyboard, Message, Update
from stock_alert_bot.exceptions import RateLimitedError, UnavailableError

logger = logging.getLogger(__name__)

_NOT_MODIFIED = "message is not modified"


class TelegramAPIError(UnavailableError):
    """The Bot API answered ``ok: false``."""

    def __init__(self, method: str, description: str, error_code: int | None = None) -> None:
        super().__init__(f"Telegram {method} failed: {description}")
        self.method = method
        self.description = description
        self.error_code = error_code


class TelegramClient:
    """Minimal async Bot API client (HTML parse mode by default)."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.telegram.org",
        timeout: float = 40.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/bot{token}",
            timeout=timeout,
            transport=transport,
        )

    async def _call(self, method: str, payload: dict[str, Any] | None = None, **kwargs: Any) -> Any:
        """POST a Bot API method and return its ``result``.

        Raises:
            RateLimitedError: Telegram answered 429.
            TelegramAPIError: Telegram answered ``ok: false``.
            UnavailableError: Transport failure.
        """
        body = {k: v for k, v in (payload or {}).items() if v is not None}
        try:
            response = await self._client.post(f"/{method}", json=body, **kwargs)
        except httpx.HTTPError as e:
            raise UnavailableError(f"Telegram {method} failed: {e}") from e
        if response.status_code == 429:
            raise RateLimitedError(f"Telegram {method} rate limited")
        try:
            data = response.json()
        except ValueError as e:
            raise UnavailableError(
                f"Telegram {method} returned {response.status_code}"
            ) from e
        if not data.get("ok"):
            raise TelegramAPIError(method, data.get("description", "unknown error"), data.get("error_code"))
        return data.get("result")

    async def send_message(
        self,
        chat_id: int | str,
        text: str,
        *,
        reply_markup: InlineKeyboard | None = None,
        parse_mode: str = "HTML",
        disable_web_page_preview: bool = True,
    ) -> Message:
        result = await self._call(
            "sendMessage",
            {
                "chat_id": chat_id,
                "text": text,
                "parse_mode": parse_mode,
                "disable_web_page_preview": disable_web_page_preview,
                "reply_markup": reply_markup.model_dump() if reply_markup else None,
            },
        )
        return Message.model_validate(result)

    async def edit_message_text(
        self,
        chat_id: int | str,
        message_id: int,
        text: str,
        *,
        reply_markup: InlineKeyboard | None = None,
        parse_mode: str = "HTML",
    ) -> None:
        """Edit a message; editing to identical content is not an error."""
        try:
            await self._call(
                "editMessageText",
                {
                    "chat_id": chat_id,
                    "message_id": message_id,
                    "text": text,
                    "parse_mode": parse_mode,
                    "disable_web_page_preview": True,
                    "reply_markup": reply_markup.model_dump() if reply_markup else None,
                },
            )
        except TelegramAPIError as e:
            if _NOT_MODIFIED not in e.description.lower():
                raise

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None, *, show_alert: bool = False
    ) -> None:
        await self._call(
            "answerCallbackQuery",
            {"callback_query_id": callback_query_id, "text": text, "show_alert": show_alert},
        )

    async def delete_message(self, chat_id: int | str, message_id: int) -> None:
        await self._call("deleteMessage", {"chat_id": chat_id, "message_id": message_id})

    async def get_updates(self, offset: int | None = None, timeout: int = 30) -> list[Update]:
        """Long-poll for updates newer than ``offset``."""
        result = await self._call(
            "getUpdates",
            {
                "offset": offset,
                "timeout": timeout,
                "allowed_updates": ["message", "callback_query"],
            },
            timeout=timeout + 10,
        )
        return [Update.model_validate(item) for item in result or []]

    async def set_webhook(self, url: str, secret_token: str | None = None) -> None:
        await self._call(
            "setWebhook",
            {
                "url": url,
                "secret_token": secret_token or None,
                "allowed_updates": ["message", "callback_query"],
            },
        )
        logger.info("Telegram webhook set to %s", url)

    async def delete_webhook(self) -> None:
        await self._call("deleteWebhook", {"drop_pending_updates": False})

    async def close(self) -> None:
        await self._client.aclose()
