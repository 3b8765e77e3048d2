"""NotificationSink that delivers alerts as Telegram messages."""
from stock_alert_bot.bot import messages
from stock_alert_bot.bot.telegram_client import TelegramClient
from stock_alert_bot.schemas import AlertEvent, WatchAlertEvent


class TelegramNotificationSink:
    """Sends alerts to the user's private chat (chat id == user id).

    Delivery failures surface as UnavailableError / RateLimitedError from the
    client; the alert engine logs them and moves on.
    """

    def __init__(self, client: TelegramClient) -> None:
        self._client = client

    async def send_alert(self, external_id: str, event: AlertEvent) -> None:
        await self._client.send_message(external_id, messages.alert(event))

    async def send_watch_alert(self, external_id: str, event: WatchAlertEvent) -> None:
        await self._client.send_message(external_id, messages.watch_alert(event))
