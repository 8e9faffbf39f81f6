"""Reporting periods: the target month plus the two months before it.

Every KPI table compares three consecutive calendar months, oldest first.
"""

import re
from dataclasses import dataclass

from ..schema.models import MonthRange

GERMAN_MONTHS = [
    "Januar", "Februar", "März", "April", "Mai", "Juni",
    "Juli", "August", "September", "Oktober", "November", "Dezember",
]

WINDOW_MONTHS = 3

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_month(value: str) -> MonthRange:
    """Parse ``"YYYY-MM"`` into a MonthRange.

    Raises:
        ValueError: if the string is not a valid year-month.
    """
    m = _MONTH_RE.match(str(value).strip())
    if not m:
        raise ValueError(f"Invalid month {value!r}, expected YYYY-MM")
    year, month = int(m.group(1)), int(m.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month {value!r}, month must be 01-12")
    return MonthRange(year, month)


def month_name(month: MonthRange | str) -> str:
    """German month name: ``2024-03`` -> ``März``."""
    if isinstance(month, str):
        month = parse_month(month)
    return GERMAN_MONTHS[month.month - 1]


def long_name(month: MonthRange | str) -> str:
    """German month name with year: ``2024-03`` -> ``März 2024``."""
    if isinstance(month, str):
        month = parse_month(month)
    return f"{GERMAN_MONTHS[month.month - 1]} {month.year}"


@dataclass(frozen=True)
class ReportPeriod:
    """Three consecutive months ending with the report's target month."""
    months: tuple[MonthRange, ...]

    @classmethod
    def from_month(cls, target_month: str) -> "ReportPeriod":
        target = parse_month(target_month)
        months = [target]
        for _ in range(WINDOW_MONTHS - 1):
            months.insert(0, months[0].previous())
        return cls(tuple(months))

    @property
    def target(self) -> MonthRange:
        return self.months[-1]

    @property
    def previous(self) -> MonthRange:
        """The month directly before the target."""
        return self.months[-2]

    @property
    def baseline(self) -> MonthRange:
        """The month before the window, used for the oldest follower delta."""
        return self.months[0].previous()

    @property
    def keys(self) -> list[str]:
        return [m.key for m in self.months]

    @property
    def label(self) -> str:
        return long_name(self.target)
