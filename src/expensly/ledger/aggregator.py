"""Transaction aggregation module."""
from decimal import Decimal
from typing import Iterable

from .models import AggregationSummary, Category, LedgerEntry, Transaction
from expensly.utils.logger import get_logger

logger = get_logger()


class Aggregator:
    """Folds transactions into a signed total for a category."""

    def summarize(self, entries: Iterable[LedgerEntry], category: Category) -> AggregationSummary:
        """
        Sum transaction amounts with the category sign.

        Args:
            entries: Transactions, possibly including the empty-range marker
            category: Active category; credits add, debits subtract

        Returns:
            AggregationSummary with the signed total and parse diagnostics
        """
        total = Decimal("0")
        counted = 0
        unparsed = 0

        for entry in entries:
            if not isinstance(entry, Transaction):
                continue
            if not entry.is_parsed:
                unparsed += 1
                continue
            total += entry.amount
            counted += 1

        if unparsed:
            logger.warning(f"{unparsed} transactions had no parseable amount and count as 0")

        return AggregationSummary(
            total=total if category.sign > 0 else -total,
            counted=counted,
            unparsed=unparsed
        )

    def aggregate(self, entries: Iterable[LedgerEntry], category: Category) -> Decimal:
        return self.summarize(entries, category).total

    def merge(self, current_total: Decimal, batch: Iterable[LedgerEntry], category: Category) -> Decimal:
        """Add a new batch onto an existing running total."""
        return current_total + self.aggregate(batch, category)
