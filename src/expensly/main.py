"""Main service entry point."""
import sys
import signal
import asyncio
import argparse
import functools
from pathlib import Path
from typing import Optional

from expensly.config.settings import AppSettings
from expensly.ledger.models import Category, Transaction
from expensly.ledger.state import LedgerState
from expensly.polling.cycle import PollCycle
from expensly.polling.scheduler import AsyncioScheduler
from expensly.polling.service import LedgerService
from expensly.polling.windows import ALL, MonthSelection, now_millis
from expensly.extraction.extractor import TransactionExtractor
from expensly.render import render_months, render_results, render_total, render_transaction
from expensly.sms.permission import PromptPermissionGate, StaticPermissionGate
from expensly.sms.transport import JsonInboxTransport
from expensly.utils.exceptions import ConfigError, ExpenslyError, TransportError
from expensly.utils.hash_registry import MessageRegistry
from expensly.utils.logger import configure_logging, get_logger

logger = get_logger()


def parse_month(value: str) -> MonthSelection:
    """Accept 1-12 or 'all' and return a 0-based month index or ALL."""
    if value.lower() == ALL:
        return ALL
    try:
        month = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"month must be 1-12 or 'all', got {value!r}")
    if not 1 <= month <= 12:
        raise argparse.ArgumentTypeError(f"month must be 1-12 or 'all', got {value!r}")
    return month - 1


def _load_settings(config_path: Optional[str]) -> AppSettings:
    """Load settings and point the logger at the configured files."""
    try:
        settings = AppSettings.load(Path(config_path) if config_path else None)
    except (FileNotFoundError, ConfigError) as e:
        logger.critical(f"Invalid configuration: {e}")
        sys.exit(1)

    configure_logging(
        settings.log_level,
        settings.logs_path,
        settings.log_max_file_size_mb,
        settings.log_backup_count,
        settings.log_file
    )
    return settings


def build_service(args: argparse.Namespace, settings: AppSettings, on_change=None) -> LedgerService:
    """Wire transport, permission gate, poll cycle and scheduler together."""
    transport = JsonInboxTransport(
        args.inbox,
        retry_max_retries=settings.retry_max_retries,
        retry_initial_delay=settings.retry_initial_delay_seconds,
        retry_backoff_factor=settings.retry_backoff_factor
    )
    gate = StaticPermissionGate(True) if args.yes else PromptPermissionGate()
    cycle = PollCycle(
        transport,
        gate,
        extractor=TransactionExtractor(settings.date_format),
        registry=MessageRegistry(settings.dedup_retention_hours),
        reference_year=settings.reference_year,
        permission_timeout_seconds=settings.permission_timeout_seconds,
        max_transactions=settings.max_transactions
    )
    service = LedgerService(
        cycle,
        AsyncioScheduler(),
        period_ms=settings.polling_period_ms,
        job_name=settings.polling_job_name,
        initial_state=LedgerState.initial(now_millis()),
        on_change=on_change
    )
    service.select_category(Category(args.category))
    return service


async def range_command(args: argparse.Namespace, settings: AppSettings) -> int:
    service = build_service(args, settings)
    try:
        state = await service.fetch_range(args.month)
    except TransportError as e:
        print(f"Could not read messages: {e}", file=sys.stderr)
        return 1
    finally:
        await service.stop()

    if state.transactions:
        print(render_results(state, settings.currency_symbol))
    else:
        print("SMS permission not granted; nothing to show.")
    return 0


def print_changes(old: LedgerState, new: LedgerState, currency_symbol: str = "₹") -> None:
    """Print the cards a tail poll prepended, then the new total."""
    # Range results are printed by the caller; only tail-poll changes land here.
    if new.view is not old.view or new.transactions == old.transactions:
        return
    first_old = old.transactions[0] if old.transactions else None
    for entry in new.transactions:
        if entry is first_old:
            break
        if isinstance(entry, Transaction):
            print(render_transaction(entry, new.category, currency_symbol))
            print()
    print(render_total(new, currency_symbol))


async def watch_command(args: argparse.Namespace, settings: AppSettings) -> int:
    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()

    def signal_handler(signum, frame):
        """Handle shutdown signals gracefully."""
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        loop.call_soon_threadsafe(shutdown.set)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    service = build_service(
        args,
        settings,
        on_change=functools.partial(print_changes, currency_symbol=settings.currency_symbol)
    )

    if args.month is not None:
        try:
            state = await service.fetch_range(args.month)
            print(render_results(state, settings.currency_symbol))
        except TransportError as e:
            print(f"Could not read messages: {e}", file=sys.stderr)

    service.start()
    try:
        await shutdown.wait()
    finally:
        await service.stop()
    return 0


def main(argv=None):
    """Main entry point for Expensly."""
    parser = argparse.ArgumentParser(description="Expensly SMS transaction tracker")
    parser.add_argument("--config", help="Path to config.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("months", help="List the selectable months")

    for name, help_text in (
        ("range", "Show all transactions of one month"),
        ("watch", "Keep polling the inbox for new transactions")
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--inbox", required=True, help="JSON export of the SMS inbox")
        sub.add_argument(
            "--category",
            choices=[c.value for c in Category],
            required=True,
            help="View credits or debits"
        )
        sub.add_argument(
            "--month",
            type=parse_month,
            required=(name == "range"),
            help="Month 1-12 of the reference year, or 'all'"
        )
        sub.add_argument("--yes", action="store_true", help="Grant SMS permission without asking")

    args = parser.parse_args(argv)
    settings = _load_settings(args.config)

    if args.command == "months":
        print(render_months(settings.reference_year))
        return 0

    command = range_command if args.command == "range" else watch_command
    try:
        return asyncio.run(command(args, settings))
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
        return 0
    except ExpenslyError as e:
        logger.critical(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
