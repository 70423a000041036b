from types import SimpleNamespace

import pytest

from app.core.exceptions import AvailabilityViolation
from app.services.availability import (
    check_availability,
    ensure_within_availability,
    find_availability_removal_conflict,
)


def _window(day: str, start: str, end: str) -> SimpleNamespace:
    return SimpleNamespace(day_of_week=day, start_time=start, end_time=end)


def _batch(name: str, days: list[str], start: str, end: str) -> SimpleNamespace:
    return SimpleNamespace(name=name, days_of_week=days, start_time=start, end_time=end)


WINDOWS = [_window("Monday", "09:00", "12:00"), _window("Wednesday", "14:00", "18:00")]


def test_schedule_fully_inside_window_passes():
    result = check_availability(WINDOWS, ["Monday"], "09:00", "12:00")
    assert result.ok
    assert result.day is None


def test_day_lookup_is_case_insensitive():
    assert check_availability(WINDOWS, ["monday", "WEDNESDAY"], "10:00", "11:00").ok is False
    assert check_availability(WINDOWS, ["monday"], "10:00", "11:00").ok


def test_missing_day_fails_with_day_in_message():
    result = check_availability(WINDOWS, ["Monday", "Tuesday"], "09:00", "10:00")
    assert not result.ok
    assert result.day == "Tuesday"
    assert result.reason == "Faculty is not available on Tuesday."


def test_partial_containment_fails():
    result = check_availability(WINDOWS, ["Monday"], "11:00", "12:30")
    assert not result.ok
    assert result.reason == "Batch time on Monday is outside of faculty's available hours."

    early = check_availability(WINDOWS, ["Monday"], "08:30", "10:00")
    assert not early.ok


def test_first_violation_short_circuits():
    result = check_availability(WINDOWS, ["Friday", "Monday"], "07:00", "08:00")
    assert result.day == "Friday"


def test_ensure_within_availability_raises_400():
    with pytest.raises(AvailabilityViolation) as exc_info:
        ensure_within_availability(WINDOWS, ["Wednesday"], "13:00", "15:00")
    assert exc_info.value.status_code == 400
    assert exc_info.value.day == "Wednesday"


def test_replacement_guard_detects_removed_day():
    batches = [_batch("Math101", ["Monday"], "09:00", "10:00")]
    message = find_availability_removal_conflict(batches, [_window("Tuesday", "09:00", "12:00")])
    assert message is not None
    assert "Math101" in message
    assert "Monday" in message


def test_replacement_guard_detects_shrunk_hours():
    batches = [_batch("Math101", ["Monday"], "09:00", "10:00")]
    message = find_availability_removal_conflict(batches, [_window("Monday", "09:30", "12:00")])
    assert message is not None
    assert "09:00-10:00" in message
    assert "09:30-12:00" in message


def test_replacement_guard_accepts_covering_windows():
    batches = [_batch("Math101", ["Monday"], "09:00", "10:00")]
    assert find_availability_removal_conflict(batches, [_window("monday", "08:00", "12:00")]) is None
