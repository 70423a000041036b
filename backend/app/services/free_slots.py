from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.batch import Batch
from app.models.faculty import Faculty, FacultyAvailability
from app.models.skill import FacultySkill
from app.models.substitution import FacultySubstitution
from app.services.intervals import iter_dates, minutes_to_time, normalize_day, runs_on, time_to_minutes, weekday_name
from app.services.substitutions import active_substitution


@dataclass
class FacultyRow:
    """Faculty with the weekly windows the calculator needs."""

    id: str
    name: str
    windows: list[FacultyAvailability] = field(default_factory=list)


@dataclass
class DaySlots:
    date: date
    time: list[str]


@dataclass
class FacultyFreeSlots:
    faculty_id: str
    faculty_name: str
    slots: list[DaySlots]


def merge_busy(intervals: Iterable[tuple[int, int]]) -> list[tuple[int, int]]:
    """Sort and merge strictly overlapping intervals; touching ones stay apart."""
    merged: list[list[int]] = []
    for start, end in sorted(intervals):
        if merged and start < merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])
    return [(start, end) for start, end in merged]


def subtract_busy(window: tuple[int, int], busy: Sequence[tuple[int, int]]) -> list[tuple[int, int]]:
    window_start, window_end = window
    cursor = window_start
    free: list[tuple[int, int]] = []
    for start, end in busy:
        if end <= cursor or start >= window_end:
            continue
        if start > cursor:
            free.append((cursor, start))
        cursor = max(cursor, end)
    if window_end > cursor:
        free.append((cursor, window_end))
    return free


def busy_intervals_on(
    faculty_id: str,
    on_date: date,
    batches: Sequence[Batch],
    substitutions: Sequence[FacultySubstitution],
) -> list[tuple[int, int]]:
    day_name = weekday_name(on_date)
    batches_by_id = {batch.id: batch for batch in batches}
    busy: list[tuple[int, int]] = []

    for batch in batches:
        if batch.faculty_id != faculty_id:
            continue
        if not (batch.start_date <= on_date <= batch.end_date) or not runs_on(batch.days_of_week, day_name):
            continue
        if active_substitution(substitutions, batch.id, on_date) is not None:
            continue
        busy.append((time_to_minutes(batch.start_time), time_to_minutes(batch.end_time)))

    for substitution in substitutions:
        if substitution.substitute_faculty_id != faculty_id:
            continue
        if not (substitution.start_date <= on_date <= substitution.end_date):
            continue
        batch = batches_by_id.get(substitution.batch_id)
        if batch is not None and runs_on(batch.days_of_week, day_name):
            busy.append((time_to_minutes(batch.start_time), time_to_minutes(batch.end_time)))
    return busy


def compute_free_slots(
    faculties: Sequence[FacultyRow],
    batches: Sequence[Batch],
    substitutions: Sequence[FacultySubstitution],
    start: date,
    end: date,
) -> list[FacultyFreeSlots]:
    """Free windows per faculty per day between ``start`` and ``end`` inclusive.

    Only days with at least one free interval are listed and only faculty with
    at least one such day are returned. The input is never mutated.
    """
    results: list[FacultyFreeSlots] = []
    for faculty in sorted(faculties, key=lambda row: (row.name, row.id)):
        windows = {normalize_day(window.day_of_week): window for window in faculty.windows}
        days: list[DaySlots] = []
        for current in iter_dates(start, end):
            window = windows.get(weekday_name(current))
            if window is None:
                continue
            busy = merge_busy(busy_intervals_on(faculty.id, current, batches, substitutions))
            free = subtract_busy((time_to_minutes(window.start_time), time_to_minutes(window.end_time)), busy)
            if free:
                days.append(
                    DaySlots(
                        date=current,
                        time=[f"{minutes_to_time(lo)} - {minutes_to_time(hi)}" for lo, hi in free],
                    )
                )
        if days:
            results.append(FacultyFreeSlots(faculty_id=faculty.id, faculty_name=faculty.name, slots=days))
    return results


def load_free_slots(
    db: Session,
    start: date,
    end: date,
    *,
    faculty_id: str | None = None,
    skill_id: str | None = None,
) -> list[FacultyFreeSlots]:
    faculty_query = select(Faculty).where(Faculty.is_active.is_(True))
    if faculty_id:
        faculty_query = faculty_query.where(Faculty.id == faculty_id)
    if skill_id:
        faculty_query = faculty_query.join(FacultySkill, FacultySkill.faculty_id == Faculty.id).where(
            FacultySkill.skill_id == skill_id
        )
    faculties = list(db.execute(faculty_query).scalars().unique())
    if not faculties:
        return []

    faculty_ids = [faculty.id for faculty in faculties]
    windows_by_faculty: dict[str, list[FacultyAvailability]] = {key: [] for key in faculty_ids}
    for window in db.execute(
        select(FacultyAvailability).where(FacultyAvailability.faculty_id.in_(faculty_ids))
    ).scalars():
        windows_by_faculty[window.faculty_id].append(window)

    batches = list(
        db.execute(select(Batch).where(Batch.start_date <= end, Batch.end_date >= start)).scalars()
    )
    substitutions = list(
        db.execute(
            select(FacultySubstitution).where(
                FacultySubstitution.start_date <= end,
                FacultySubstitution.end_date >= start,
            )
        ).scalars()
    )
    rows = [
        FacultyRow(id=faculty.id, name=faculty.name, windows=windows_by_faculty[faculty.id])
        for faculty in faculties
    ]
    return compute_free_slots(rows, batches, substitutions, start, end)
