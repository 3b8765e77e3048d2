"""In-process stand-in for the Telegram Bot API, served through httpx.MockTransport."""
import json

import httpx

from stock_alert_bot.bot.models import Update
from stock_alert_bot.bot.telegram_client import TelegramClient


class FakeTelegramAPI:
    """Records every Bot API call; methods listed in ``failures`` answer with the given payload."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []
        self.failures: dict[str, tuple[int, dict]] = {}
        self._next_message_id = 500

    def __call__(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content or b"{}")
        self.calls.append((method, body))
        if method in self.failures:
            status, payload = self.failures[method]
            return httpx.Response(status, json=payload)
        if method == "sendMessage":
            self._next_message_id += 1
            result = {
                "message_id": self._next_message_id,
                "chat": {"id": body["chat_id"], "type": "private"},
                "text": body["text"],
            }
        elif method == "getUpdates":
            result = []
        else:
            result = True
        return httpx.Response(200, json={"ok": True, "result": result})

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def bodies(self, method: str) -> list[dict]:
        return [body for name, body in self.calls if name == method]

    def client(self) -> TelegramClient:
        return TelegramClient(
            "TEST:TOKEN", base_url="https://telegram.test", transport=httpx.MockTransport(self)
        )


def message_update(text: str, user_id: int = 1001, update_id: int = 1) -> Update:
    return Update.model_validate(
        {
            "update_id": update_id,
            "message": {
                "message_id": 10,
                "chat": {"id": user_id, "type": "private"},
                "from": {"id": user_id, "is_bot": False, "first_name": "Alice", "username": "alice"},
                "text": text,
            },
        }
    )


def callback_update(data: str, user_id: int = 1001, update_id: int = 2) -> Update:
    return Update.model_validate(
        {
            "update_id": update_id,
            "callback_query": {
                "id": f"cb-{update_id}",
                "from": {"id": user_id, "is_bot": False, "first_name": "Alice", "username": "alice"},
                "message": {
                    "message_id": 77,
                    "chat": {"id": user_id, "type": "private"},
                    "text": "previous prompt",
                },
                "data": data,
            },
        }
    )
