"""Date helpers shared by the day managers."""

from __future__ import annotations

from datetime import date, datetime

from homeassistant.util import dt as dt_util

from .errors import InvalidInputError

# Single-entry cache: (local calendar date, local midnight).
_today_cache: tuple[date, datetime] | None = None


def start_of_today() -> datetime:
    """Return local midnight for today, rebuilt only when the date rolls over."""
    global _today_cache  # noqa: PLW0603
    today = dt_util.now().date()
    if _today_cache is None or _today_cache[0] != today:
        _today_cache = (today, dt_util.start_of_local_day(today))
    return _today_cache[1]


def get_today() -> date:
    return start_of_today().date()


def is_today(value: date | datetime) -> bool:
    if isinstance(value, datetime):
        value = dt_util.as_local(value).date()
    return value == get_today()


def format_date(value: date) -> str:
    """Short label, e.g. 'Mon, Jan 1'."""
    return f"{value:%a}, {value:%b} {value.day}"


def format_date_long(value: date) -> str:
    """Long label, e.g. 'Monday, January 1'."""
    return f"{value:%A}, {value:%B} {value.day}"


def to_iso(value: date) -> str:
    return value.isoformat()


def parse_date(value: object) -> date:
    """Accept a date, datetime or ISO string and truncate to the calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raw = str(value or "").strip()[:10]
    try:
        return date.fromisoformat(raw)
    except ValueError as err:
        raise InvalidInputError(f"Invalid date: {value!r}") from err
