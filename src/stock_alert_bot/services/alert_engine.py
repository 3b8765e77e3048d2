"""Periodic price alerts for held positions and watched symbols.

One cycle loads every position and every pending watch entry, fetches one
quote per distinct symbol, and evaluates each holder against that quote.
A failure on one symbol (or one position) never aborts the rest of the
cycle, and nothing escapes ``run_cycle``.
"""
import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from decimal import Decimal

from stock_alert_bot.exceptions import StockBotError
from stock_alert_bot.schemas import (AlertCycleReport, AlertEvent,
                                     HolderPosition, Quote, WatchAlertEvent,
                                     WatcherEntry)
from stock_alert_bot.services.market_service import (QUIET_QUOTE_ERRORS,
                                                     MarketService)
from stock_alert_bot.services.protocols import (NotificationSink,
                                                PortfolioStore,
                                                WatchlistStore)
from stock_alert_bot.utils import percent_change

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = Decimal("5")
DEFAULT_WATCH_LEVELS = (Decimal("3"), Decimal("5"))


def should_alert(
    current_price: Decimal,
    buy_price: Decimal,
    last_notified_price: Decimal | None,
    threshold: Decimal = DEFAULT_THRESHOLD,
) -> bool:
    """Decide whether a position crossed the threshold since its last alert.

    The move from the buy price must reach the threshold. After the first
    alert, the move from the last notified price must reach it as well, so a
    price oscillating near one level does not re-alert.
    """
    if abs(percent_change(current_price, buy_price)) < threshold:
        return False
    if not last_notified_price:
        return True
    return abs(percent_change(current_price, last_notified_price)) >= threshold


def watch_alert_level(
    current_price: Decimal,
    base_price: Decimal,
    alert3_sent: bool,
    alert5_sent: bool,
    levels: tuple[Decimal, ...] = DEFAULT_WATCH_LEVELS,
) -> Decimal | None:
    """Return the watch level to alert at now, or None.

    The high level wins when both are crossed at once; each level fires at
    most once per entry.
    """
    low, high = levels[0], levels[-1]
    move = abs(percent_change(current_price, base_price))
    if move >= high and not alert5_sent:
        return high
    if move >= low and not alert3_sent:
        return low
    return None


class AlertEngine:
    """Runs alert cycles against the stores, the market service and a sink."""

    def __init__(
        self,
        portfolio_store: PortfolioStore,
        watchlist_store: WatchlistStore,
        market: MarketService,
        sink: NotificationSink,
        *,
        threshold: Decimal = DEFAULT_THRESHOLD,
        watch_levels: tuple[Decimal, ...] = DEFAULT_WATCH_LEVELS,
        symbol_delay_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the engine.

        Args:
            portfolio_store: Source of positions and sink of watermarks.
            watchlist_store: Source of watch entries and sink of their flags.
            market: Quote lookups (already mapped to the error taxonomy).
            sink: Delivers alerts to users.
            threshold: Percent move that triggers a position alert.
            watch_levels: (low, high) percent levels for watch alerts.
            symbol_delay_seconds: Pause between quote fetches within a cycle.
            sleep: Awaitable sleep, replaceable in tests.
        """
        self._positions = portfolio_store
        self._watchlist = watchlist_store
        self._market = market
        self._sink = sink
        self._threshold = threshold
        self._watch_levels = tuple(sorted(watch_levels))
        self._delay = symbol_delay_seconds
        self._sleep = sleep

    async def run_cycle(self) -> AlertCycleReport:
        """Run one full alert cycle; never raises."""
        report = AlertCycleReport()
        try:
            positions = await asyncio.to_thread(self._positions.list_all_positions)
            watches = await asyncio.to_thread(self._watchlist.list_all_watch_entries)

            holders: dict[str, list[HolderPosition]] = defaultdict(list)
            watchers: dict[str, list[WatcherEntry]] = defaultdict(list)
            for position in positions:
                holders[position.symbol].append(position)
            for entry in watches:
                watchers[entry.symbol].append(entry)

            symbols = sorted(set(holders) | set(watchers))
            logger.info(
                "Alert cycle: %d positions, %d watch entries, %d symbols",
                len(positions), len(watches), len(symbols),
            )
            for index, symbol in enumerate(symbols):
                if index and self._delay > 0:
                    await self._sleep(self._delay)
                await self._process_symbol(
                    symbol, holders.get(symbol, []), watchers.get(symbol, []), report
                )
            report.completed = True
        except Exception:  # pylint: disable=broad-except
            logger.exception("Alert cycle failed")
        logger.info("Alert cycle finished: %s", report.model_dump())
        return report

    async def _process_symbol(
        self,
        symbol: str,
        holders: list[HolderPosition],
        watchers: list[WatcherEntry],
        report: AlertCycleReport,
    ) -> None:
        try:
            quote = await self._market.get_quote(symbol)
        except QUIET_QUOTE_ERRORS as e:
            logger.debug("Skipping %s this cycle: %s", symbol, e)
            report.symbols_skipped += 1
            return
        except StockBotError as e:
            logger.warning("Skipping %s this cycle: %s", symbol, e)
            report.symbols_skipped += 1
            return
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected quote failure for %s", symbol)
            report.symbols_skipped += 1
            return

        report.symbols_checked += 1
        for position in holders:
            try:
                await self._evaluate_position(position, quote, report)
            except Exception:  # pylint: disable=broad-except
                logger.exception("Failed to evaluate position %s for %s", position.id, symbol)
        for entry in watchers:
            try:
                await self._evaluate_watch(entry, quote, report)
            except Exception:  # pylint: disable=broad-except
                logger.exception("Failed to evaluate watch entry %s for %s", entry.id, symbol)

    async def _evaluate_position(
        self, position: HolderPosition, quote: Quote, report: AlertCycleReport
    ) -> None:
        price = quote.price
        if not should_alert(
            price, position.average_buy_price, position.last_notified_price, self._threshold
        ):
            return
        event = AlertEvent(
            symbol=position.symbol,
            current_price=price,
            average_buy_price=position.average_buy_price,
            percent_change_from_buy=percent_change(price, position.average_buy_price),
            quantity=position.quantity,
        )
        if not await self._deliver(self._sink.send_alert, position.external_id, event, report):
            return
        report.alerts_sent += 1
        await asyncio.to_thread(self._positions.update_last_notified, position.id, price)

    async def _evaluate_watch(
        self, entry: WatcherEntry, quote: Quote, report: AlertCycleReport
    ) -> None:
        price = quote.price
        level = watch_alert_level(
            price, entry.base_price, entry.alert3_sent, entry.alert5_sent, self._watch_levels
        )
        if level is None:
            return
        event = WatchAlertEvent(
            symbol=entry.symbol,
            current_price=price,
            base_price=entry.base_price,
            percent_change=percent_change(price, entry.base_price),
            level=level,
        )
        if not await self._deliver(self._sink.send_watch_alert, entry.external_id, event, report):
            return
        report.watch_alerts_sent += 1
        high = level == self._watch_levels[-1]
        await asyncio.to_thread(
            self._watchlist.mark_watch_alerts,
            entry.id,
            alert3_sent=True,
            alert5_sent=entry.alert5_sent or high,
        )

    async def _deliver(self, send, external_id: str, event, report: AlertCycleReport) -> bool:
        """Send one alert; failures are logged and counted, never raised."""
        try:
            await send(external_id, event)
        except StockBotError as e:
            logger.warning("Alert delivery to %s failed for %s: %s", external_id, event.symbol, e)
            report.delivery_failures += 1
            return False
        except Exception:  # pylint: disable=broad-except
            logger.exception("Alert delivery to %s failed for %s", external_id, event.symbol)
            report.delivery_failures += 1
            return False
        return True
