"""Data models for the transaction ledger."""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Union

UNPARSED = "unparsed"
UNKNOWN = "unknown"


class Category(Enum):
    """Which side of the account the session is looking at."""
    CREDITS = "credits"
    DEBITS = "debits"

    @property
    def sign(self) -> int:
        return 1 if self is Category.CREDITS else -1

    @property
    def total_label(self) -> str:
        return "Received" if self is Category.CREDITS else "Spent"

    @property
    def counterparty_label(self) -> str:
        return "From" if self is Category.CREDITS else "To"


@dataclass(frozen=True)
class Transaction:
    """Transaction data extracted from one message."""
    amount: Union[Decimal, str]  # Decimal or UNPARSED
    counterparty: str  # name or UNKNOWN
    date: str
    sender: str

    @property
    def is_parsed(self) -> bool:
        return isinstance(self.amount, Decimal)


@dataclass(frozen=True)
class NoTransactions:
    """Marker for a range query that ran and found nothing."""
    message: str = "No transactions made in this month"


NO_TRANSACTIONS = NoTransactions()

LedgerEntry = Union[Transaction, NoTransactions]


@dataclass(frozen=True)
class AggregationSummary:
    """Signed total of a batch plus parse diagnostics."""
    total: Decimal
    counted: int
    unparsed: int
