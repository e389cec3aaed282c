"""Poll cycle: permission -> windowed fetch -> extract -> aggregate -> commit."""
import asyncio
from typing import Callable, List, Optional

from .windows import MonthSelection, range_window, tail_window, now_millis
from expensly.extraction.extractor import TransactionExtractor
from expensly.extraction.patterns import MessageKind
from expensly.ledger.aggregator import Aggregator
from expensly.ledger.models import Category, Transaction
from expensly.ledger.state import LedgerState
from expensly.sms.models import RawMessage
from expensly.sms.permission import PermissionGate
from expensly.sms.transport import MessageTransport
from expensly.utils.hash_registry import MessageRegistry
from expensly.utils.logger import get_logger
from expensly.utils.exceptions import PermissionDenied, TransportError, ValidationError

logger = get_logger()


class PollCycle:
    """Runs range queries and incremental tail polls against a LedgerState.

    Both operations take the current state and return the next one. The
    state passed in is never modified, so a failed poll leaves the caller
    holding the previous value.
    """

    def __init__(
        self,
        transport: MessageTransport,
        permission_gate: PermissionGate,
        extractor: Optional[TransactionExtractor] = None,
        aggregator: Optional[Aggregator] = None,
        registry: Optional[MessageRegistry] = None,
        reference_year: int = 2024,
        permission_timeout_seconds: float = 30,
        max_transactions: Optional[int] = None,
        clock: Callable[[], int] = now_millis
    ):
        self.transport = transport
        self.permission_gate = permission_gate
        self.extractor = extractor or TransactionExtractor()
        self.aggregator = aggregator or Aggregator()
        self.registry = registry or MessageRegistry()
        self.reference_year = reference_year
        self.permission_timeout_seconds = permission_timeout_seconds
        self.max_transactions = max_transactions
        self.clock = clock

    async def fetch_range(self, state: LedgerState, month: MonthSelection) -> LedgerState:
        """Replace the ledger with everything found in a month (or the whole year so far).

        Raises:
            ValidationError: no category selected, or an invalid month
            TransportError: the inbox could not be listed
        """
        category = self._require_category(state)

        try:
            await self._authorize()
        except PermissionDenied as e:
            logger.info(f"Range query aborted: {e}")
            return state

        now_ms = self.clock()
        window = range_window(month, self.reference_year, now_ms)

        try:
            messages = await self.transport.list_messages(window.start_ms, window.end_ms)
        except TransportError as e:
            logger.error(f"Failed to fetch messages for range {month!r}: {e}")
            raise

        transactions = self.extractor.extract_all(messages, category)
        summary = self.aggregator.summarize(transactions, category)

        self.registry.clear()
        self._remember(messages, category)

        logger.info(
            f"Range {month!r}: {len(messages)} messages, {len(transactions)} transactions, "
            f"total {summary.total}"
        )
        return state.with_range_result(
            transactions,
            summary.total,
            checked_ms=min(window.end_ms, now_ms),
            max_transactions=self.max_transactions
        )

    async def poll_incremental(self, state: LedgerState) -> LedgerState:
        """Pick up messages received since the last poll.

        Permission refusals and transport failures are logged and return the
        state unchanged, so the same window is tried again on the next tick.
        """
        try:
            await self._authorize()
        except PermissionDenied as e:
            logger.info(f"Tail poll skipped: {e}")
            return state

        now_ms = self.clock()
        if state.category is None:
            logger.debug("No category selected yet, advancing without fetching")
            return state.with_new_batch([], state.total, checked_ms=now_ms)

        window = tail_window(state.poll, now_ms)

        try:
            messages = await self.transport.list_messages(window.start_ms, window.end_ms)
        except TransportError as e:
            logger.error(f"Failed to check new SMS: {e}")
            return state

        self.registry.prune(now_ms)
        if not messages:
            return state.with_new_batch([], state.total, checked_ms=now_ms)

        newest_first = sorted(messages, key=lambda m: m.timestamp_ms, reverse=True)
        batch = self._extract_unseen(newest_first, state.category)
        if not batch:
            return state.with_new_batch([], state.total, checked_ms=now_ms)

        total = self.aggregator.merge(state.total, batch, state.category)
        logger.info(f"Tail poll found {len(batch)} new transactions, total now {total}")
        return state.with_new_batch(
            batch,
            total,
            checked_ms=now_ms,
            max_transactions=self.max_transactions
        )

    async def _authorize(self) -> None:
        try:
            granted = await asyncio.wait_for(
                self.permission_gate.request_authorization(),
                timeout=self.permission_timeout_seconds
            )
        except asyncio.TimeoutError:
            raise PermissionDenied(
                f"permission prompt timed out after {self.permission_timeout_seconds}s"
            )

        if not granted:
            raise PermissionDenied("SMS permission not granted")

    def _extract_unseen(self, messages: List[RawMessage], category: Category) -> List[Transaction]:
        batch = []
        for message in messages:
            key = self.registry.calculate_key(message)
            if self.registry.is_seen(key):
                logger.debug(f"Skipping already counted message from {message.sender}")
                continue

            transaction = self.extractor.extract(message, category)
            if transaction is not None:
                batch.append(transaction)
                self.registry.mark_message(message)
        return batch

    def _remember(self, messages: List[RawMessage], category: Category) -> None:
        for message in messages:
            if self.extractor.classify(message, category) is not MessageKind.UNRECOGNIZED:
                self.registry.mark_message(message)

    @staticmethod
    def _require_category(state: LedgerState) -> Category:
        if state.category is None:
            raise ValidationError("Select credits or debits before querying a range")
        return state.category
