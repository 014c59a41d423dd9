"""Period arithmetic and month-name parsing."""

import unicodedata
from datetime import date
from dateutil.relativedelta import relativedelta

from dreboard.domain.entities import Period

MONTH_NAMES = (
    "Janeiro",
    "Fevereiro",
    "Março",
    "Abril",
    "Maio",
    "Junho",
    "Julho",
    "Agosto",
    "Setembro",
    "Outubro",
    "Novembro",
    "Dezembro",
)


def _fold(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", text.strip().lower())
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))


_MONTHS_BY_NAME = {_fold(name): index for index, name in enumerate(MONTH_NAMES, start=1)}


def month_name(month: int) -> str:
    """Return the Portuguese name of a month number (1-12)."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return MONTH_NAMES[month - 1]


def parse_month(value: str | int) -> int:
    """Parse a month given as a number or a Portuguese name.

    Accepts "3", 3, "Março", "marco" or "MAR" (three-letter prefix).

    Raises:
        ValueError: If the value is not a recognizable month
    """
    if isinstance(value, int):
        month = value
    else:
        text = value.strip()
        if text.isdigit():
            month = int(text)
        else:
            folded = _fold(text)
            if folded in _MONTHS_BY_NAME:
                return _MONTHS_BY_NAME[folded]
            matches = [idx for name, idx in _MONTHS_BY_NAME.items() if len(folded) >= 3 and name.startswith(folded)]
            if len(matches) != 1:
                raise ValueError(f"Unknown month '{value}'")
            return matches[0]

    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return month


def period_from_date(value: date) -> Period:
    """Return the period containing ``value``."""
    return Period(value.year, value.month)


def shift_period(period: Period, months: int) -> Period:
    """Move a period by a number of calendar months (negative goes back)."""
    shifted = date(period.year, period.month, 1) + relativedelta(months=months)
    return Period(shifted.year, shifted.month)


def previous_period(period: Period) -> Period:
    """Return the month immediately before ``period``, rolling the year over in January."""
    return shift_period(period, -1)


def twelve_month_window(period: Period) -> list[Period]:
    """Return the 12 periods ending at and including ``period``, oldest first."""
    return [shift_period(period, offset) for offset in range(-11, 1)]


def format_period(period: Period) -> str:
    """Render a period as e.g. "Março/2024"."""
    return f"{month_name(period.month)}/{period.year}"
