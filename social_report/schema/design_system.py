"""Design system utilities: German value formatting and trend pills.

Formatting rules (de-DE):
- Numbers: grouped thousands with dots, 1.234.567
- Compact numbers: 1,2K / 3,4M
- Currency: 1.234,56 €
- Percentages: 3,25%
- Trends: +50,0% / -20,0%, dash when there is no previous value
- Dates: DD.MM.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime

from .models import DesignSystem, slugify

__all__ = [
    "Trend",
    "TREND_THRESHOLD_PCT",
    "NO_TREND",
    "trend",
    "format_number",
    "format_compact",
    "format_currency",
    "format_percent",
    "format_date",
    "slugify",
]

TREND_THRESHOLD_PCT = 5.0
NO_TREND = "–"


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and (math.isnan(value)
                                                           or math.isinf(value)))


def _group(digits: str) -> str:
    """Swap the en-US grouping/decimal marks for de-DE ones."""
    return digits.replace(",", "\x00").replace(".", ",").replace("\x00", ".")


def format_number(value: float | int | None) -> str:
    """Rounded whole number with German grouping: 1234567 -> 1.234.567."""
    if _is_missing(value):
        return "0"
    return _group(f"{int(round(value)):,}")


def format_compact(value: float | int | None) -> str:
    """Short form for chart labels: 1234 -> 1,2K, 3400000 -> 3,4M."""
    if _is_missing(value):
        return "0"
    v = abs(value)
    sign = "-" if value < 0 else ""
    if v >= 1_000_000:
        return f"{sign}{v / 1_000_000:.1f}M".replace(".", ",")
    if v >= 1_000:
        return f"{sign}{v / 1_000:.1f}K".replace(".", ",")
    return f"{sign}{int(round(v))}"


def format_currency(value: float | int | None) -> str:
    """Euro amount: 1234.56 -> 1.234,56 €."""
    if _is_missing(value):
        return "0,00 €"
    return _group(f"{value:,.2f}") + " €"


def format_percent(value: float | int | None, decimals: int = 2) -> str:
    """Rate without sign: 3.254 -> 3,25%."""
    if _is_missing(value):
        value = 0.0
    return f"{value:.{decimals}f}".replace(".", ",") + "%"


def format_date(value: date | datetime) -> str:
    """Day and month: 2024-03-05 -> 05.03."""
    return f"{value.day:02d}.{value.month:02d}."


# ---------------------------------------------------------------------------
# Trend derivation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Trend:
    """Month-over-month change as displayed in a KPI trend pill."""
    text: str
    color: str
    pct: float | None

    @property
    def direction(self) -> str:
        if self.pct is None:
            return "none"
        if self.pct >= TREND_THRESHOLD_PCT:
            return "up"
        if self.pct <= -TREND_THRESHOLD_PCT:
            return "down"
        return "neutral"


def trend(current: float | int, previous: float | int,
          design: DesignSystem | None = None) -> Trend:
    """Derive the trend pill for ``current`` against ``previous``.

    A previous value of zero has no defined percentage and yields the dash
    with the neutral colour, whatever the current value is.
    """
    design = design or DesignSystem()
    current = 0 if _is_missing(current) else current
    previous = 0 if _is_missing(previous) else previous
    if previous == 0:
        return Trend(NO_TREND, design.trend_neutral, None)

    pct = (current - previous) / previous * 100
    sign = "+" if pct >= 0 else ""
    text = f"{sign}{pct:.1f}".replace(".", ",") + "%"
    if pct >= TREND_THRESHOLD_PCT:
        color = design.trend_up
    elif pct <= -TREND_THRESHOLD_PCT:
        color = design.trend_down
    else:
        color = design.trend_neutral
    return Trend(text, color, pct)
