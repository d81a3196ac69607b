"""Canonical UTC day keys.

A stored diary day is the UTC-midnight instant of its calendar day, written as
``YYYY-MM-DDT00:00:00.000Z``. Keys of that shape sort lexicographically in time
order, so range lookups compare them directly.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from nikki.errors import ValidationError

_KEY_FORMAT = "%Y-%m-%dT%H:%M:%S"
_LAST_MILLISECOND = timedelta(days=1) - timedelta(milliseconds=1)


def format_instant(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return f"{value.strftime(_KEY_FORMAT)}.{value.microsecond // 1000:03d}Z"


def utc_midnight(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


@dataclass(frozen=True)
class DayRange:
    start: datetime
    end: datetime

    @property
    def start_key(self) -> str:
        return format_instant(self.start)

    @property
    def end_key(self) -> str:
        return format_instant(self.end)

    @property
    def day(self) -> date:
        return self.start.date()

    def contains(self, instant: datetime) -> bool:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return self.start <= instant <= self.end


def to_day(value) -> date:
    """Reduce a ``YYYY-MM-DD`` string, ISO timestamp, date or datetime to its UTC calendar day."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid date: {value!r}")
    raw = value.strip()
    try:
        if len(raw) == 10:
            return date.fromisoformat(raw)
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r}")
    return to_day(parsed)


def day_range(value) -> DayRange:
    start = utc_midnight(to_day(value))
    return DayRange(start=start, end=start + _LAST_MILLISECOND)


def day_key(value) -> str:
    return day_range(value).start_key


def month_range(year: int, month: int) -> DayRange:
    """Bounds of a month given a zero-based ``month``; out-of-range months roll the year."""
    try:
        year_offset, month_index = divmod(int(month), 12)
        first = date(int(year) + year_offset, month_index + 1, 1)
        next_offset, next_index = divmod(int(month) + 1, 12)
        following = date(int(year) + next_offset, next_index + 1, 1)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Invalid month: {year}-{month}")
    return DayRange(start=utc_midnight(first), end=utc_midnight(following) - timedelta(milliseconds=1))


def parse_day_key(key: str) -> date:
    try:
        return date.fromisoformat(str(key)[:10])
    except ValueError:
        raise ValidationError(f"Invalid day key: {key!r}")
