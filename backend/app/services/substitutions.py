from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import AppError, NotFoundError, SchedulingConflict, ValidationError
from app.models.attendance import StudentAttendance
from app.models.batch import Batch, BatchStudent
from app.models.faculty import Faculty
from app.models.substitution import FacultySubstitution
from app.services.availability import ensure_within_availability, load_windows
from app.services.conflicts import Schedule, ensure_no_conflict, load_commitments, schedule_of
from app.services.integrity import translate_integrity_error
from app.services.intervals import dates_overlap

logger = logging.getLogger(__name__)

_UNSET = object()

CREATE_OVERLAP_MESSAGE = "This batch already has an overlapping substitution scheduled."
UPDATE_OVERLAP_MESSAGE = "The new dates overlap with another substitution for this same batch."


@dataclass(frozen=True)
class ActingFaculty:
    faculty_id: str | None
    original_faculty_id: str | None
    substitution: FacultySubstitution | None = None

    @property
    def is_substituted(self) -> bool:
        return self.substitution is not None


def active_substitution(
    substitutions: Iterable[FacultySubstitution],
    batch_id: str,
    on_date: date,
) -> FacultySubstitution | None:
    for substitution in substitutions:
        if substitution.batch_id == batch_id and substitution.start_date <= on_date <= substitution.end_date:
            return substitution
    return None


def resolve_acting_faculty(
    batch: Batch,
    substitutions: Iterable[FacultySubstitution],
    on_date: date,
) -> ActingFaculty:
    """Who actually teaches ``batch`` on ``on_date``.

    The batch row is never consulted for overrides; the substitution overlay
    wins whenever one covers the date.
    """
    substitution = active_substitution(substitutions, batch.id, on_date)
    if substitution is None:
        return ActingFaculty(faculty_id=batch.faculty_id, original_faculty_id=batch.faculty_id)
    return ActingFaculty(
        faculty_id=substitution.substitute_faculty_id,
        original_faculty_id=batch.faculty_id,
        substitution=substitution,
    )


def substitutions_covering(db: Session, on_date: date, batch_ids: Iterable[str] | None = None) -> list[FacultySubstitution]:
    query = select(FacultySubstitution).where(
        FacultySubstitution.start_date <= on_date,
        FacultySubstitution.end_date >= on_date,
    )
    if batch_ids is not None:
        query = query.where(FacultySubstitution.batch_id.in_(list(batch_ids)))
    return list(db.execute(query).scalars())


def list_upcoming_substitutions(db: Session, today: date) -> list[FacultySubstitution]:
    return list(
        db.execute(
            select(FacultySubstitution)
            .where(FacultySubstitution.end_date >= today)
            .order_by(FacultySubstitution.start_date, FacultySubstitution.id)
        ).scalars()
    )


def _get_batch(db: Session, batch_id: str) -> Batch:
    batch = db.get(Batch, batch_id)
    if batch is None:
        raise NotFoundError("Batch", batch_id)
    return batch


def _get_faculty(db: Session, faculty_id: str) -> Faculty:
    faculty = db.get(Faculty, faculty_id)
    if faculty is None:
        raise NotFoundError("Faculty", faculty_id)
    return faculty


def _ensure_date_order(start_date: date, end_date: date) -> None:
    if start_date > end_date:
        raise ValidationError("Start date must be on or before end date.")


def _ensure_no_batch_overlap(
    db: Session,
    batch_id: str,
    start_date: date,
    end_date: date,
    *,
    message: str,
    exclude_substitution_id: str | None = None,
) -> None:
    query = select(FacultySubstitution).where(FacultySubstitution.batch_id == batch_id)
    if exclude_substitution_id is not None:
        query = query.where(FacultySubstitution.id != exclude_substitution_id)
    for other in db.execute(query).scalars():
        if dates_overlap(start_date, end_date, other.start_date, other.end_date):
            raise SchedulingConflict(message)


def _vet_substitute(
    db: Session,
    batch: Batch,
    substitute_id: str,
    start_date: date,
    end_date: date,
    today: date,
    *,
    exclude_substitution_id: str | None = None,
) -> None:
    _get_faculty(db, substitute_id)
    if batch.faculty_id == substitute_id:
        raise ValidationError("Cannot assign a faculty as their own substitute.")
    ensure_within_availability(load_windows(db, substitute_id), batch.days_of_week, batch.start_time, batch.end_time)
    candidate = Schedule(
        days_of_week=list(batch.days_of_week or []),
        start_time=batch.start_time,
        end_time=batch.end_time,
        start_date=start_date,
        end_date=end_date,
    )
    commitments = load_commitments(
        db,
        substitute_id,
        today,
        exclude_batch_id=batch.id,
        exclude_substitution_id=exclude_substitution_id,
    )
    ensure_no_conflict(candidate, commitments, as_substitute=True)


def _commit(db: Session, *, overlap_message: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise translate_integrity_error(exc, overlap_message=overlap_message) from exc


def create_temporary_substitution(
    db: Session,
    *,
    batch_id: str,
    substitute_faculty_id: str,
    start_date: date,
    end_date: date,
    notes: str | None,
    today: date,
) -> tuple[FacultySubstitution, Batch]:
    _ensure_date_order(start_date, end_date)
    batch = _get_batch(db, batch_id)
    if batch.faculty_id is None:
        raise ValidationError("Batch has no assigned faculty to substitute.")
    _vet_substitute(db, batch, substitute_faculty_id, start_date, end_date, today)
    _ensure_no_batch_overlap(db, batch.id, start_date, end_date, message=CREATE_OVERLAP_MESSAGE)

    substitution = FacultySubstitution(
        batch_id=batch.id,
        original_faculty_id=batch.faculty_id,
        substitute_faculty_id=substitute_faculty_id,
        start_date=start_date,
        end_date=end_date,
        notes=notes,
    )
    db.add(substitution)
    _commit(db, overlap_message=CREATE_OVERLAP_MESSAGE)
    db.refresh(substitution)
    logger.info(
        "substitution_created id=%s batch_id=%s substitute_faculty_id=%s",
        substitution.id,
        batch.id,
        substitute_faculty_id,
    )
    return substitution, batch


def update_temporary_substitution(
    db: Session,
    substitution_id: str,
    *,
    today: date,
    substitute_faculty_id: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    notes: object = _UNSET,
) -> tuple[FacultySubstitution, Batch]:
    """Change dates, substitute or notes of a substitution.

    Conflict checks for the substitute run only when the substitute changes;
    the same-batch overlap check runs on every update.
    """
    substitution = db.get(FacultySubstitution, substitution_id)
    if substitution is None:
        raise NotFoundError("Substitution record", substitution_id)
    batch = _get_batch(db, substitution.batch_id)

    new_start = start_date or substitution.start_date
    new_end = end_date or substitution.end_date
    _ensure_date_order(new_start, new_end)

    substitute_changed = (
        substitute_faculty_id is not None and substitute_faculty_id != substitution.substitute_faculty_id
    )
    if substitute_changed:
        _vet_substitute(
            db,
            batch,
            substitute_faculty_id,
            new_start,
            new_end,
            today,
            exclude_substitution_id=substitution.id,
        )
    _ensure_no_batch_overlap(
        db,
        batch.id,
        new_start,
        new_end,
        message=UPDATE_OVERLAP_MESSAGE,
        exclude_substitution_id=substitution.id,
    )

    if substitute_changed:
        substitution.substitute_faculty_id = substitute_faculty_id
    substitution.start_date = new_start
    substitution.end_date = new_end
    if notes is not _UNSET:
        substitution.notes = notes
    _commit(db, overlap_message=UPDATE_OVERLAP_MESSAGE)
    db.refresh(substitution)
    return substitution, batch


def cancel_temporary_substitution(db: Session, substitution_id: str) -> str:
    """Delete a substitution and return the name of its batch."""
    substitution = db.get(FacultySubstitution, substitution_id)
    if substitution is None:
        raise NotFoundError("Substitution record", substitution_id)
    batch = db.get(Batch, substitution.batch_id)
    batch_name = batch.name if batch is not None else substitution.batch_id
    db.delete(substitution)
    db.commit()
    return batch_name


def assign_permanent_faculty(db: Session, *, batch_id: str, faculty_id: str, today: date) -> Batch:
    batch = _get_batch(db, batch_id)
    _get_faculty(db, faculty_id)
    if batch.faculty_id == faculty_id:
        raise ValidationError("This faculty is already assigned to the batch.")

    ensure_within_availability(load_windows(db, faculty_id), batch.days_of_week, batch.start_time, batch.end_time)
    ensure_no_conflict(schedule_of(batch), load_commitments(db, faculty_id, today, exclude_batch_id=batch.id))

    batch.faculty_id = faculty_id
    db.commit()
    db.refresh(batch)
    return batch


def merge_batches(db: Session, *, source_batch_id: str, target_batch_id: str) -> tuple[str, str]:
    """Move the source batch's students into the target and delete the source.

    Runs as one transaction. Returns the source and target batch names.
    """
    if source_batch_id == target_batch_id:
        raise ValidationError("Cannot merge a batch into itself.")
    source = _get_batch(db, source_batch_id)
    target = _get_batch(db, target_batch_id)
    source_name, target_name = source.name, target.name

    try:
        enrolled = set(
            db.execute(select(BatchStudent.student_id).where(BatchStudent.batch_id == target.id)).scalars()
        )
        for link in db.execute(select(BatchStudent).where(BatchStudent.batch_id == source.id)).scalars().all():
            if link.student_id in enrolled:
                db.delete(link)
                continue
            link.batch_id = target.id
            enrolled.add(link.student_id)
        db.flush()
        db.execute(delete(FacultySubstitution).where(FacultySubstitution.batch_id == source.id))
        db.execute(delete(StudentAttendance).where(StudentAttendance.batch_id == source.id))
        db.delete(source)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("batch_merge_failed source=%s target=%s", source_batch_id, target_batch_id)
        raise AppError("An unexpected error occurred during the merge.", status_code=500) from exc

    logger.info("batch_merged source=%s target=%s", source_batch_id, target_batch_id)
    return source_name, target_name
