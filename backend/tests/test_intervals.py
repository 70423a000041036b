from datetime import date, time

from app.services.intervals import (
    dates_overlap,
    days_overlap,
    iter_dates,
    minutes_to_time,
    normalize_day,
    time_to_minutes,
    times_overlap,
    weekday_name,
)


def test_time_to_minutes_accepts_common_formats():
    assert time_to_minutes("09:30") == 570
    assert time_to_minutes("09:30:00") == 570
    assert time_to_minutes(time(14, 5)) == 845
    assert time_to_minutes("00:00") == 0


def test_time_to_minutes_returns_zero_for_malformed_input():
    assert time_to_minutes("") == 0
    assert time_to_minutes(None) == 0
    assert time_to_minutes("nine") == 0
    assert time_to_minutes("ab:cd") == 0


def test_minutes_to_time_pads_and_optionally_adds_seconds():
    assert minutes_to_time(570) == "09:30"
    assert minutes_to_time(5) == "00:05"
    assert minutes_to_time(845, with_seconds=True) == "14:05:00"


def test_day_names_are_normalized_case_insensitively():
    assert normalize_day("monday") == "Monday"
    assert normalize_day("MON") == "Monday"
    assert normalize_day(" Sat ") == "Saturday"
    assert normalize_day("Someday") is None


def test_weekday_name_starts_week_on_sunday():
    assert weekday_name(date(2025, 1, 5)) == "Sunday"
    assert weekday_name(date(2025, 1, 6)) == "Monday"
    assert weekday_name(date(2024, 6, 5)) == "Wednesday"


def test_days_overlap_ignores_case_and_short_forms():
    assert days_overlap(["Monday", "Wednesday"], ["wed"])
    assert not days_overlap(["Monday"], ["Tuesday", "Friday"])
    assert not days_overlap([], ["Monday"])


def test_dates_overlap_is_inclusive():
    assert dates_overlap(date(2025, 1, 1), date(2025, 1, 10), date(2025, 1, 10), date(2025, 1, 20))
    assert not dates_overlap(date(2025, 1, 1), date(2025, 1, 9), date(2025, 1, 10), date(2025, 1, 20))


def test_times_overlap_is_strict_at_boundaries():
    assert times_overlap("09:00", "10:00", "09:30", "10:30")
    assert times_overlap("09:00", "12:00", "10:00", "11:00")
    assert not times_overlap("09:00", "10:00", "10:00", "11:00")
    assert not times_overlap("10:00", "11:00", "09:00", "10:00")


def test_iter_dates_includes_both_ends():
    days = list(iter_dates(date(2025, 1, 30), date(2025, 2, 2)))
    assert days == [date(2025, 1, 30), date(2025, 1, 31), date(2025, 2, 1), date(2025, 2, 2)]
    assert list(iter_dates(date(2025, 2, 2), date(2025, 2, 1))) == []
