"""Time windows for inbox queries."""
import calendar
from dataclasses import dataclass
from datetime import datetime
from typing import List, Tuple, Union

from expensly.ledger.state import PollState
from expensly.utils.exceptions import ValidationError

ALL = "all"

MonthSelection = Union[int, str]


@dataclass(frozen=True)
class Window:
    """Closed interval [start_ms, end_ms] in epoch milliseconds."""
    start_ms: int
    end_ms: int


def to_millis(moment: datetime) -> int:
    return round(moment.timestamp() * 1000)


def now_millis() -> int:
    return to_millis(datetime.now())


def range_window(month: MonthSelection, reference_year: int, now_ms: int) -> Window:
    """Window for a month index (0 = January) of the reference year, or ALL.

    A month runs from its first to its last millisecond in local time. ALL
    runs from January 1st of the reference year up to now.
    """
    if month == ALL:
        return Window(to_millis(datetime(reference_year, 1, 1)), now_ms)

    if isinstance(month, bool) or not isinstance(month, int) or not 0 <= month <= 11:
        raise ValidationError(f"Month must be 0-11 or '{ALL}', got {month!r}")

    start = datetime(reference_year, month + 1, 1)
    if month == 11:
        next_start = datetime(reference_year + 1, 1, 1)
    else:
        next_start = datetime(reference_year, month + 2, 1)
    return Window(to_millis(start), to_millis(next_start) - 1)


def tail_window(poll: PollState, now_ms: int) -> Window:
    return Window(poll.last_checked_ms, now_ms)


def month_options(reference_year: int) -> List[Tuple[str, MonthSelection]]:
    """Labels offered on the range selector, e.g. ("March 2024", 2)."""
    options: List[Tuple[str, MonthSelection]] = [
        (f"{calendar.month_name[index + 1]} {reference_year}", index)
        for index in range(12)
    ]
    options.append(("All Transactions", ALL))
    return options
