from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import SchedulingConflict
from app.models.batch import Batch
from app.models.substitution import FacultySubstitution
from app.services.intervals import dates_overlap, days_overlap, times_overlap

logger = logging.getLogger(__name__)

PERMANENT = "batch"
TEMPORARY = "substitution"


@dataclass(frozen=True)
class Schedule:
    """A weekly recurring time range bounded by a date range."""

    days_of_week: list[str]
    start_time: str
    end_time: str
    start_date: date
    end_date: date


@dataclass(frozen=True)
class Commitment:
    kind: str
    batch_id: str
    batch_name: str
    schedule: Schedule
    substitution_id: str | None = field(default=None)


def schedules_collide(left: Schedule, right: Schedule) -> bool:
    return (
        days_overlap(left.days_of_week, right.days_of_week)
        and dates_overlap(left.start_date, left.end_date, right.start_date, right.end_date)
        and times_overlap(left.start_time, left.end_time, right.start_time, right.end_time)
    )


def find_conflict(candidate: Schedule, commitments: Iterable[Commitment]) -> Commitment | None:
    for commitment in commitments:
        if schedules_collide(candidate, commitment.schedule):
            return commitment
    return None


def schedule_of(batch: Batch) -> Schedule:
    return Schedule(
        days_of_week=list(batch.days_of_week or []),
        start_time=batch.start_time,
        end_time=batch.end_time,
        start_date=batch.start_date,
        end_date=batch.end_date,
    )


def load_commitments(
    db: Session,
    faculty_id: str,
    today: date,
    *,
    exclude_batch_id: str | None = None,
    exclude_substitution_id: str | None = None,
) -> list[Commitment]:
    """Non-completed permanent batches and temporary substitutions of a faculty.

    A substitution's effective schedule is its batch's days and times limited
    to the substitution's own date range. ``exclude_batch_id`` drops both
    sources for that batch so a batch never conflicts with itself.
    """
    batch_query = select(Batch).where(Batch.faculty_id == faculty_id, Batch.end_date >= today)
    if exclude_batch_id is not None:
        batch_query = batch_query.where(Batch.id != exclude_batch_id)
    commitments = [
        Commitment(kind=PERMANENT, batch_id=batch.id, batch_name=batch.name, schedule=schedule_of(batch))
        for batch in db.execute(batch_query.order_by(Batch.start_date, Batch.name)).scalars()
    ]

    substitution_query = (
        select(FacultySubstitution, Batch)
        .join(Batch, Batch.id == FacultySubstitution.batch_id)
        .where(
            FacultySubstitution.substitute_faculty_id == faculty_id,
            FacultySubstitution.end_date >= today,
        )
    )
    if exclude_batch_id is not None:
        substitution_query = substitution_query.where(Batch.id != exclude_batch_id)
    if exclude_substitution_id is not None:
        substitution_query = substitution_query.where(FacultySubstitution.id != exclude_substitution_id)
    for substitution, batch in db.execute(substitution_query.order_by(FacultySubstitution.start_date)).all():
        commitments.append(
            Commitment(
                kind=TEMPORARY,
                batch_id=batch.id,
                batch_name=batch.name,
                schedule=Schedule(
                    days_of_week=list(batch.days_of_week or []),
                    start_time=batch.start_time,
                    end_time=batch.end_time,
                    start_date=substitution.start_date,
                    end_date=substitution.end_date,
                ),
                substitution_id=substitution.id,
            )
        )
    return commitments


def conflict_message(commitment: Commitment, *, as_substitute: bool = False) -> str:
    if not as_substitute:
        return f"Faculty has a scheduling conflict with batch: {commitment.batch_name}."
    if commitment.kind == PERMANENT:
        return f"Substitute has a permanent conflict with batch: {commitment.batch_name}."
    return f"Substitute is already scheduled for another substitution for batch: {commitment.batch_name}."


def ensure_no_conflict(
    candidate: Schedule,
    commitments: Iterable[Commitment],
    *,
    as_substitute: bool = False,
) -> None:
    hit = find_conflict(candidate, commitments)
    if hit is not None:
        logger.info(
            "schedule_conflict kind=%s batch_id=%s batch_name=%s",
            hit.kind,
            hit.batch_id,
            hit.batch_name,
        )
        raise SchedulingConflict(conflict_message(hit, as_substitute=as_substitute), batch_name=hit.batch_name)
