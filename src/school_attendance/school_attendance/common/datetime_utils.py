from __future__ import annotations

import calendar
from datetime import date, datetime, time

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Tanggal tidak valid (YYYY-MM-DD)")


def parse_time_of_day(value: str | time) -> time:
    """Parse HH:MM or HH:MM:SS into a naive time-of-day."""
    if isinstance(value, time):
        return value.replace(microsecond=0)

    v = (value or "").strip()
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError("Jam tidak valid (HH:MM atau HH:MM:SS)")


def parse_year_month(value: str) -> tuple[int, int]:
    try:
        parsed = datetime.strptime((value or "").strip(), "%Y-%m")
    except ValueError:
        raise ValidationError("Bulan tidak valid (YYYY-MM)")
    return parsed.year, parsed.month


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month (both inclusive)."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def format_time(value: time | None) -> str:
    return value.strftime("%H:%M:%S") if value else "-"


def now_local() -> datetime:
    """Current local wall-clock time, truncated to whole seconds.

    Note: Wrapped so tests can patch it.
    """
    return datetime.now().replace(microsecond=0)
