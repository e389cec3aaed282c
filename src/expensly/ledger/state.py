"""Immutable ledger state shared between the poll cycle and presentation."""
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence, Tuple

from .models import Category, LedgerEntry, NO_TRANSACTIONS, NoTransactions


class ViewState(Enum):
    HOME = "home"
    CATEGORY_SELECTOR = "category-selector"
    RANGE_SELECTOR = "range-selector"
    RESULTS = "results"


@dataclass(frozen=True)
class PollState:
    """Inclusive lower bound of the next incremental window."""
    last_checked_ms: int

    def advance(self, to_ms: int) -> "PollState":
        """Move forward to ``to_ms``; never moves backwards."""
        return PollState(max(self.last_checked_ms, to_ms))


@dataclass(frozen=True)
class LedgerState:
    """Everything a poll reads and commits, as one value.

    Transactions are kept newest-first. Poll operations return a new
    LedgerState instead of mutating this one.
    """
    poll: PollState
    category: Optional[Category] = None
    total: Decimal = Decimal("0")
    transactions: Tuple[LedgerEntry, ...] = ()
    view: ViewState = ViewState.HOME

    @classmethod
    def initial(cls, now_ms: int, category: Optional[Category] = None) -> "LedgerState":
        return cls(poll=PollState(now_ms), category=category)

    @property
    def is_empty_result(self) -> bool:
        """True when the last range query found nothing."""
        return len(self.transactions) == 1 and isinstance(self.transactions[0], NoTransactions)

    def select_category(self, category: Category) -> "LedgerState":
        return replace(self, category=category, view=ViewState.RANGE_SELECTOR)

    def show(self, view: ViewState) -> "LedgerState":
        return replace(self, view=view)

    def with_range_result(
        self,
        transactions: Sequence[LedgerEntry],
        total: Decimal,
        checked_ms: int,
        max_transactions: Optional[int] = None
    ) -> "LedgerState":
        """Replace list and total wholesale with a range query's output."""
        entries = tuple(transactions) or (NO_TRANSACTIONS,)
        return replace(
            self,
            transactions=self._bounded(entries, max_transactions),
            total=total,
            poll=self.poll.advance(checked_ms),
            view=ViewState.RESULTS
        )

    def with_new_batch(
        self,
        batch: Sequence[LedgerEntry],
        total: Decimal,
        checked_ms: int,
        max_transactions: Optional[int] = None
    ) -> "LedgerState":
        """Prepend an incremental batch; an empty batch only advances the poll state."""
        if not batch:
            return replace(self, poll=self.poll.advance(checked_ms))

        previous = () if self.is_empty_result else self.transactions
        entries = tuple(batch) + previous
        return replace(
            self,
            transactions=self._bounded(entries, max_transactions),
            total=total,
            poll=self.poll.advance(checked_ms)
        )

    @staticmethod
    def _bounded(entries: Tuple[LedgerEntry, ...], max_transactions: Optional[int]) -> Tuple[LedgerEntry, ...]:
        # Oldest entries sit at the tail and are evicted first.
        if max_transactions is not None and len(entries) > max_transactions:
            return entries[:max_transactions]
        return entries
