from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo


def as_date(value: date | datetime) -> date:
    """Drop any time-of-day component so calendar math starts at midnight."""
    if isinstance(value, datetime):
        return value.date()
    return value


def add_days(value: date | datetime, days: int) -> date:
    """Shift a calendar date by ``days`` (negative values go backwards)."""
    return as_date(value) + timedelta(days=days)


def shift_days(value: date | datetime, days: int) -> date:
    """``add_days`` that stops at ``date.min`` / ``date.max`` instead of raising."""
    try:
        return add_days(value, days)
    except OverflowError:
        return date.max if days > 0 else date.min


def diff_in_days(d1: date | datetime, d2: date | datetime) -> int:
    """Return ``d1 - d2`` in whole calendar days.

    Both sides are normalised to midnight first, so a timestamp late on the
    same calendar day never counts as an extra day and DST shifts cannot leak
    fractional days into the result.
    """
    delta = as_date(d1) - as_date(d2)
    return round(delta.total_seconds() / 86400)


def get_today(tz: str | None = None) -> date:
    if tz:
        return datetime.now(ZoneInfo(tz)).date()
    return date.today()


def parse_date(value: str | date | datetime | None) -> date | None:
    """Accept ``YYYY-MM-DD`` strings, full ISO timestamps or date objects."""
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return as_date(value)
    text = str(value).strip()
    if "T" in text or " " in text:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return date.fromisoformat(text)
