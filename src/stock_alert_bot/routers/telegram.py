"""Telegram webhook endpoint."""
import hmac
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException

from stock_alert_bot.bot import Dispatcher
from stock_alert_bot.bot.models import Update
from stock_alert_bot.config import Settings
from stock_alert_bot.container import get_app_settings, get_dispatcher

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/telegram", tags=["telegram"])


@router.post("/webhook")
async def telegram_webhook(
    update: Update,
    background_tasks: BackgroundTasks,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    settings: Settings = Depends(get_app_settings),
    x_telegram_bot_api_secret_token: str | None = Header(default=None),
) -> dict:
    """Accept an update from Telegram and handle it after responding.

    Telegram retries non-2xx responses, so handling errors never fail the request.
    """
    secret = settings.telegram_webhook_secret
    if secret and not hmac.compare_digest(x_telegram_bot_api_secret_token or "", secret):
        logger.warning("Rejected webhook call with a bad secret token")
        raise HTTPException(status_code=403, detail="Invalid secret token")
    background_tasks.add_task(dispatcher.dispatch, update)
    return {"ok": True}
