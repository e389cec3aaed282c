"""Transaction extraction from bank notification text."""
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional

from .patterns import PATTERNS, CATEGORY_KINDS, MessageKind
from expensly.ledger.models import Category, Transaction, UNPARSED, UNKNOWN
from expensly.sms.models import RawMessage

TWO_PLACES = Decimal("0.01")


class TransactionExtractor:
    """Turns raw inbox messages into transactions for the active category.

    Extraction is keyword first, structure second. A message that carries
    the category's marker always produces a transaction; fields the
    structural pattern cannot recover fall back to sentinels.
    """

    def __init__(self, date_format: str = "%d/%m/%Y"):
        self.date_format = date_format

    def classify(self, message: RawMessage, category: Category) -> MessageKind:
        """Return the message kind for the category, or UNRECOGNIZED."""
        kind = CATEGORY_KINDS[category]
        if PATTERNS[kind].qualifies(message.body):
            return kind
        return MessageKind.UNRECOGNIZED

    def extract(self, message: RawMessage, category: Category) -> Optional[Transaction]:
        kind = self.classify(message, category)
        if kind is MessageKind.UNRECOGNIZED:
            return None

        match = PATTERNS[kind].regex.search(message.body)
        amount = self._parse_amount(match.group("amount")) if match else UNPARSED
        counterparty = match.group("counterparty").strip() if match else ""
        date = match.group("date") if match else self.format_timestamp(message.timestamp_ms)

        return Transaction(
            amount=amount,
            counterparty=counterparty or UNKNOWN,
            date=date,
            sender=message.sender
        )

    def extract_all(self, messages: Iterable[RawMessage], category: Category) -> List[Transaction]:
        """Extract every qualifying message, keeping transport order."""
        transactions = []
        for message in messages:
            transaction = self.extract(message, category)
            if transaction is not None:
                transactions.append(transaction)
        return transactions

    def format_timestamp(self, timestamp_ms: int) -> str:
        return datetime.fromtimestamp(timestamp_ms / 1000).strftime(self.date_format)

    @staticmethod
    def _parse_amount(raw: str):
        try:
            return Decimal(raw).quantize(TWO_PLACES)
        except InvalidOperation:
            return UNPARSED
