from datetime import date, datetime, timezone

import pytest
from freezegun import freeze_time

from app.core.clock import Clock, FixedClock, SystemClock


@freeze_time("2025-03-01 20:00:00")
def test_system_clock_uses_configured_timezone():
    assert SystemClock("UTC").today() == date(2025, 3, 1)
    assert SystemClock("Asia/Kolkata").today() == date(2025, 3, 2)


def test_fixed_clock_accepts_dates_and_datetimes():
    assert FixedClock(date(2025, 1, 6)).today() == date(2025, 1, 6)
    moment = datetime(2025, 1, 6, 23, 59, tzinfo=timezone.utc)
    assert FixedClock(moment).now() == moment


def test_clock_without_now_cannot_be_created():
    class Broken(Clock):
        pass

    with pytest.raises(TypeError):
        Broken()
