"""Admin CLI for the stock alert bot.

Usage:
  stock-alert-bot-admin init-db
  stock-alert-bot-admin run-alerts
  stock-alert-bot-admin quote AAPL
"""
import argparse
import asyncio
import json
import sys

from stock_alert_bot.config import configure_logging, get_settings
from stock_alert_bot.container import Container, init_container
from stock_alert_bot.db.sessions import init_db
from stock_alert_bot.exceptions import ConfigurationError, StockBotError


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_init_db(container: Container, _: argparse.Namespace) -> int:
    init_db(container.db_engine())
    print("Database tables are ready.")
    return 0


async def _run_alerts(container: Container) -> dict:
    try:
        report = await container.alert_engine().run_cycle()
        return report.model_dump()
    finally:
        await container.market_service().close()
        await container.telegram_client().close()


def cmd_run_alerts(container: Container, _: argparse.Namespace) -> int:
    container.settings().validate_for_bot()
    report = asyncio.run(_run_alerts(container))
    print_json(report)
    return 0 if report["completed"] else 1


async def _quote(container: Container, symbol: str) -> dict:
    market = container.market_service()
    try:
        quote = await market.get_quote(symbol)
        return quote.model_dump()
    finally:
        await market.close()


def cmd_quote(container: Container, args: argparse.Namespace) -> int:
    print_json(asyncio.run(_quote(container, args.symbol)))
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Administer the stock alert bot.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command")

    p = subparsers.add_parser("init-db", help="Create database tables")
    p.set_defaults(func=cmd_init_db)
    p = subparsers.add_parser("run-alerts", help="Run one alert cycle now")
    p.set_defaults(func=cmd_run_alerts)
    p = subparsers.add_parser("quote", help="Fetch a quote from the configured provider")
    p.add_argument("symbol", help="Ticker (e.g. AAPL, MSFT)")
    p.set_defaults(func=cmd_quote)

    args = parser.parse_args()
    try:
        settings = get_settings()
        configure_logging(settings.log_level)
        return args.func(init_container(settings), args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except StockBotError as e:
        print(f"Error ({e.code}): {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
