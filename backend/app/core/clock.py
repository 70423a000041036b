from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.core.config import get_settings


class Clock(ABC):
    """Source of "today" for status derivation and commitment filtering."""

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    def __init__(self, timezone_name: str | None = None) -> None:
        self._zone = ZoneInfo(timezone_name or get_settings().app_timezone or "UTC")

    def now(self) -> datetime:
        return datetime.now(self._zone)


class FixedClock(Clock):
    def __init__(self, frozen: date | datetime) -> None:
        if isinstance(frozen, datetime):
            self._now = frozen
        else:
            self._now = datetime(frozen.year, frozen.month, frozen.day, 12, 0, tzinfo=ZoneInfo("UTC"))

    def now(self) -> datetime:
        return self._now


default_clock = SystemClock()
