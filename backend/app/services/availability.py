from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import AvailabilityViolation
from app.models.faculty import FacultyAvailability
from app.services.intervals import minutes_to_time, normalize_day, time_to_minutes

logger = logging.getLogger(__name__)


class WindowLike(Protocol):
    day_of_week: str
    start_time: str
    end_time: str


class ScheduledBatch(Protocol):
    name: str
    days_of_week: list[str]
    start_time: str
    end_time: str


@dataclass(frozen=True)
class AvailabilityCheck:
    ok: bool
    day: str | None = None
    reason: str | None = None


def _window_for(windows: Iterable[WindowLike], day: str) -> WindowLike | None:
    target = normalize_day(day) or day.lower()
    for window in windows:
        if (normalize_day(window.day_of_week) or window.day_of_week.lower()) == target:
            return window
    return None


def check_availability(
    windows: Sequence[WindowLike],
    proposed_days: Sequence[str],
    proposed_start: str,
    proposed_end: str,
) -> AvailabilityCheck:
    """Verify the proposed schedule fits inside the weekly availability.

    Every proposed day must have a window and the proposed time range must be
    fully contained in it. The first violation is reported.
    """
    start = time_to_minutes(proposed_start)
    end = time_to_minutes(proposed_end)
    for day in proposed_days:
        window = _window_for(windows, day)
        if window is None:
            return AvailabilityCheck(ok=False, day=day, reason=f"Faculty is not available on {day}.")
        if start < time_to_minutes(window.start_time) or end > time_to_minutes(window.end_time):
            return AvailabilityCheck(
                ok=False,
                day=day,
                reason=f"Batch time on {day} is outside of faculty's available hours.",
            )
    return AvailabilityCheck(ok=True)


def ensure_within_availability(
    windows: Sequence[WindowLike],
    proposed_days: Sequence[str],
    proposed_start: str,
    proposed_end: str,
) -> None:
    result = check_availability(windows, proposed_days, proposed_start, proposed_end)
    if not result.ok:
        logger.info("availability_rejected day=%s reason=%s", result.day, result.reason)
        raise AvailabilityViolation(result.reason or "Faculty is not available.", day=result.day)


def find_availability_removal_conflict(
    batches: Iterable[ScheduledBatch],
    new_windows: Sequence[WindowLike],
) -> str | None:
    """Return a message if replacing availability would strand a running batch."""
    for batch in batches:
        for day in batch.days_of_week or []:
            window = _window_for(new_windows, day)
            if window is None:
                return (
                    f'Update failed. The faculty has batch "{batch.name}" on {day}, '
                    "but this day is being removed from the new availability."
                )
            if time_to_minutes(batch.start_time) < time_to_minutes(window.start_time) or time_to_minutes(
                batch.end_time
            ) > time_to_minutes(window.end_time):
                batch_range = (
                    f"{minutes_to_time(time_to_minutes(batch.start_time))}-"
                    f"{minutes_to_time(time_to_minutes(batch.end_time))}"
                )
                window_range = (
                    f"{minutes_to_time(time_to_minutes(window.start_time))}-"
                    f"{minutes_to_time(time_to_minutes(window.end_time))}"
                )
                return (
                    f'Update failed. Batch "{batch.name}" ({batch_range} on {day}) '
                    f"conflicts with the new availability slot ({window_range})."
                )
    return None


def load_windows(db: Session, faculty_id: str) -> list[FacultyAvailability]:
    return list(
        db.execute(select(FacultyAvailability).where(FacultyAvailability.faculty_id == faculty_id)).scalars()
    )
