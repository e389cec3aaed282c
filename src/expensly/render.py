"""Plain-text rendering of the ledger screens."""
from decimal import Decimal
from typing import List

from expensly.ledger.models import Category, Transaction
from expensly.ledger.state import LedgerState
from expensly.polling.windows import month_options


def format_amount(amount, currency_symbol: str = "₹") -> str:
    if isinstance(amount, Decimal):
        return f"{currency_symbol}{amount:.2f}"
    return str(amount)


def render_total(state: LedgerState, currency_symbol: str = "₹") -> str:
    category = state.category or Category.DEBITS
    # The empty-range marker is never summed; its total renders as zero.
    total = Decimal("0") if state.is_empty_result else abs(state.total)
    return f"Total {category.total_label}: {format_amount(total, currency_symbol)}"


def render_transaction(transaction: Transaction, category: Category, currency_symbol: str = "₹") -> str:
    return "\n".join([
        f"Date: {transaction.date}",
        f"Amount: {format_amount(transaction.amount, currency_symbol)}",
        f"{category.counterparty_label}: {transaction.counterparty}",
        f"Bank: {transaction.sender}",
    ])


def render_results(state: LedgerState, currency_symbol: str = "₹") -> str:
    """Results screen: total first, then one card per transaction."""
    category = state.category or Category.DEBITS
    lines = [render_total(state, currency_symbol), ""]

    if state.is_empty_result:
        lines.append(state.transactions[0].message)
        return "\n".join(lines)

    cards: List[str] = [
        render_transaction(entry, category, currency_symbol)
        for entry in state.transactions
        if isinstance(entry, Transaction)
    ]
    lines.append("\n\n".join(cards))
    return "\n".join(lines)


def render_months(reference_year: int) -> str:
    """Range selector; months are numbered 1-12 for the command line."""
    lines = ["Select a Month"]
    for label, value in month_options(reference_year):
        key = value if isinstance(value, str) else value + 1
        lines.append(f"  {key:>4}  {label}")
    return "\n".join(lines)
