"""Structural patterns for bank notification messages."""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Pattern, Tuple

from expensly.ledger.models import Category


class MessageKind(Enum):
    CREDIT = "credit"
    DEBIT = "debit"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class TransactionPattern:
    """Keyword markers and the named-group regex for one kind of message.

    The regex must define the groups ``amount``, ``date`` and
    ``counterparty``.
    """
    kind: MessageKind
    markers: Tuple[str, ...]
    regex: Pattern

    def qualifies(self, body: str) -> bool:
        return any(marker in body for marker in self.markers)


# Amounts carry at most two fraction digits; dates look like 05Jan24.
AMOUNT = r"(?P<amount>\d+(?:\.\d{1,2})?)"
DATE = r"(?P<date>\d{2}\w{3}\d{2})"
COUNTERPARTY = r"(?P<counterparty>[A-Za-z\s]+)"

PATTERNS: Dict[MessageKind, TransactionPattern] = {
    MessageKind.CREDIT: TransactionPattern(
        kind=MessageKind.CREDIT,
        markers=("credited",),
        regex=re.compile(
            rf"credited by Rs\.{AMOUNT} on {DATE} transfer from {COUNTERPARTY} Ref No",
            re.IGNORECASE
        )
    ),
    MessageKind.DEBIT: TransactionPattern(
        kind=MessageKind.DEBIT,
        markers=("debited", "spent"),
        regex=re.compile(
            rf"debited by {AMOUNT} on date {DATE} trf to {COUNTERPARTY} Ref",
            re.IGNORECASE
        )
    ),
}

CATEGORY_KINDS: Dict[Category, MessageKind] = {
    Category.CREDITS: MessageKind.CREDIT,
    Category.DEBITS: MessageKind.DEBIT,
}
