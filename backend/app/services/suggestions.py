from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.batch import Batch
from app.models.faculty import Faculty, FacultyAvailability
from app.models.skill import FacultySkill
from app.models.substitution import FacultySubstitution
from app.schemas.suggestion import CommonSlot, FacultySuggestion, SuggestFacultyRequest
from app.services.free_slots import merge_busy, subtract_busy
from app.services.intervals import minutes_to_time, normalize_day, runs_on, time_to_minutes

AVAILABLE = "available"
AVAILABLE_OTHER_TIMES = "available_other_times"


def intersect_slots(
    left: Sequence[tuple[int, int]],
    right: Sequence[tuple[int, int]],
) -> list[tuple[int, int]]:
    common: list[tuple[int, int]] = []
    for left_start, left_end in left:
        for right_start, right_end in right:
            start = max(left_start, right_start)
            end = min(left_end, right_end)
            if start < end:
                common.append((start, end))
    return sorted(common)


def common_free_slots(
    windows: Sequence[FacultyAvailability],
    booked: Sequence[tuple[list[str], int, int]],
    days: Sequence[str],
) -> list[tuple[int, int]]:
    """Free intervals shared by every requested weekday.

    ``booked`` holds (days_of_week, start, end) for each commitment that falls
    in the requested date range.
    """
    by_day = {normalize_day(window.day_of_week): window for window in windows}
    common: list[tuple[int, int]] | None = None
    for day in days:
        window = by_day.get(normalize_day(day))
        if window is None:
            return []
        busy = merge_busy((start, end) for booked_days, start, end in booked if runs_on(booked_days, day))
        free = subtract_busy((time_to_minutes(window.start_time), time_to_minutes(window.end_time)), busy)
        common = free if common is None else intersect_slots(common, free)
        if not common:
            return []
    return common or []


def classify(
    slots: Sequence[tuple[int, int]],
    start_time: str | None,
    end_time: str | None,
) -> str:
    if not (start_time and end_time):
        return AVAILABLE
    wanted_start = time_to_minutes(start_time)
    wanted_end = time_to_minutes(end_time)
    if any(start <= wanted_start and end >= wanted_end for start, end in slots):
        return AVAILABLE
    return AVAILABLE_OTHER_TIMES


def suggest_faculty(db: Session, request: SuggestFacultyRequest) -> list[FacultySuggestion]:
    faculties = list(
        db.execute(
            select(Faculty)
            .join(FacultySkill, FacultySkill.faculty_id == Faculty.id)
            .where(FacultySkill.skill_id == request.skill_id, Faculty.is_active.is_(True))
            .order_by(Faculty.name, Faculty.id)
        ).scalars()
    )
    if not faculties:
        return []
    faculty_ids = [faculty.id for faculty in faculties]

    windows: dict[str, list[FacultyAvailability]] = {key: [] for key in faculty_ids}
    for window in db.execute(
        select(FacultyAvailability).where(FacultyAvailability.faculty_id.in_(faculty_ids))
    ).scalars():
        windows[window.faculty_id].append(window)

    booked: dict[str, list[tuple[list[str], int, int]]] = {key: [] for key in faculty_ids}
    for batch in db.execute(
        select(Batch).where(
            Batch.faculty_id.in_(faculty_ids),
            Batch.start_date <= request.end_date,
            Batch.end_date >= request.start_date,
        )
    ).scalars():
        booked[batch.faculty_id].append(
            (list(batch.days_of_week or []), time_to_minutes(batch.start_time), time_to_minutes(batch.end_time))
        )
    for substitution, batch in db.execute(
        select(FacultySubstitution, Batch)
        .join(Batch, Batch.id == FacultySubstitution.batch_id)
        .where(
            FacultySubstitution.substitute_faculty_id.in_(faculty_ids),
            FacultySubstitution.start_date <= request.end_date,
            FacultySubstitution.end_date >= request.start_date,
        )
    ).all():
        booked[substitution.substitute_faculty_id].append(
            (list(batch.days_of_week or []), time_to_minutes(batch.start_time), time_to_minutes(batch.end_time))
        )

    suggestions: list[FacultySuggestion] = []
    for faculty in faculties:
        slots = common_free_slots(windows[faculty.id], booked[faculty.id], request.days_of_week)
        if not slots:
            continue
        suggestions.append(
            FacultySuggestion(
                id=faculty.id,
                name=faculty.name,
                common_slots=[CommonSlot(start=minutes_to_time(start), end=minutes_to_time(end)) for start, end in slots],
                status=classify(slots, request.start_time, request.end_time),
            )
        )
    return suggestions
