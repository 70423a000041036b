from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, time, timedelta

DAY_NAMES: tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

_DAY_LOOKUP: dict[str, str] = {}
for _name in DAY_NAMES:
    _DAY_LOOKUP[_name.lower()] = _name
    _DAY_LOOKUP[_name[:3].lower()] = _name


def normalize_day(value: str) -> str | None:
    """Return the canonical day name for ``value`` or ``None`` if unknown.

    Accepts full and three-letter forms in any case ("mon", "MONDAY").
    """
    if not isinstance(value, str):
        return None
    return _DAY_LOOKUP.get(value.strip().lower())


def weekday_name(value: date) -> str:
    # date.weekday() is Monday=0; DAY_NAMES starts on Sunday.
    return DAY_NAMES[(value.weekday() + 1) % 7]


def time_to_minutes(value: str | time | None) -> int:
    """Minutes since midnight for ``HH:MM`` / ``HH:MM:SS`` or a ``time``.

    Malformed input yields 0; callers validate upstream.
    """
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if not isinstance(value, str) or ":" not in value:
        return 0
    parts = value.strip().split(":")
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except (IndexError, ValueError):
        return 0
    return hours * 60 + minutes


def minutes_to_time(minutes: int, with_seconds: bool = False) -> str:
    hours, remainder = divmod(int(minutes), 60)
    text = f"{hours:02d}:{remainder:02d}"
    if with_seconds:
        text += ":00"
    return text


def days_overlap(days_a: Iterable[str], days_b: Iterable[str]) -> bool:
    left = {normalize_day(day) or str(day).lower() for day in days_a or ()}
    right = {normalize_day(day) or str(day).lower() for day in days_b or ()}
    return bool(left & right)


def dates_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    return start_a <= end_b and start_b <= end_a


def times_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """Strict overlap on the minute axis; back-to-back sessions do not overlap."""
    a_start, a_end = time_to_minutes(start_a), time_to_minutes(end_a)
    b_start, b_end = time_to_minutes(start_b), time_to_minutes(end_b)
    return a_start < b_end and b_start < a_end


def runs_on(days: Iterable[str], day_name: str) -> bool:
    target = normalize_day(day_name)
    return any(normalize_day(day) == target for day in days or ())


def iter_dates(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
