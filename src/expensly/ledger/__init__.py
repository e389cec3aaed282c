"""Ledger models, aggregation and state."""
from .models import (
    Category,
    Transaction,
    NoTransactions,
    NO_TRANSACTIONS,
    AggregationSummary,
    UNPARSED,
    UNKNOWN
)
from .aggregator import Aggregator
from .state import LedgerState, PollState, ViewState

__all__ = [
    "Category",
    "Transaction",
    "NoTransactions",
    "NO_TRANSACTIONS",
    "AggregationSummary",
    "UNPARSED",
    "UNKNOWN",
    "Aggregator",
    "LedgerState",
    "PollState",
    "ViewState"
]
