"""Main module for the stock alert bot service."""
import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from stock_alert_bot import __version__
from stock_alert_bot.config import configure_logging, get_settings
from stock_alert_bot.container import Container, init_container
from stock_alert_bot.db.sessions import init_db
from stock_alert_bot.routers import telegram_router

logger = logging.getLogger(__name__)


async def _shutdown(container: Container, polling_task: asyncio.Task | None) -> None:
    if polling_task is not None:
        polling_task.cancel()
        try:
            await polling_task
        except asyncio.CancelledError:
            pass
    await container.scheduler().stop()
    await container.dispatcher().drain()
    for name, close in (
        ("market service", container.market_service().close),
        ("telegram client", container.telegram_client().close),
    ):
        try:
            await close()
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Error closing %s: %s", name, exc)
    container.db_engine().dispose()


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    """Initialize storage, start the alert scheduler and Telegram intake; tear down on exit."""
    container: Container = fastapi_app.state.container
    settings = container.settings()
    settings.validate_for_bot()

    await asyncio.to_thread(init_db, container.db_engine())
    await container.scheduler().start()

    client = container.telegram_client()
    polling_task: asyncio.Task | None = None
    if settings.webhook_enabled:
        await client.set_webhook(settings.telegram_webhook_url, settings.telegram_webhook_secret)
    else:
        await client.delete_webhook()
        polling_task = asyncio.create_task(
            container.dispatcher().poll_forever(settings.telegram_poll_timeout_seconds),
            name="telegram-polling",
        )

    yield

    await _shutdown(container, polling_task)


def create_app(container: Container | None = None) -> FastAPI:
    fastapi_app = FastAPI(
        title="Stock Alert Bot",
        description="Telegram bot for portfolio tracking and price alerts",
        version=__version__,
        lifespan=lifespan,
    )
    fastapi_app.state.container = container or init_container()
    fastapi_app.include_router(telegram_router)

    @fastapi_app.get("/")
    def health():
        """Return health check status."""
        return {"status": "ok"}

    return fastapi_app


app = create_app()


def run():
    """Run the server (uvicorn). Entry point for `stock-alert-bot`."""
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run("stock_alert_bot.main:app", host=settings.host, port=settings.port)
