from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import IntegrityViolation, NotFoundError, ValidationError
from app.models.attendance import StudentAttendance
from app.models.batch import Batch, BatchStudent
from app.models.faculty import Faculty
from app.models.skill import Skill
from app.models.student import Student
from app.models.substitution import FacultySubstitution
from app.models.user import User, UserRole
from app.schemas.batch import BatchOut, BatchWrite
from app.schemas.common import FacultyRef
from app.schemas.skill import SkillOut
from app.services.availability import ensure_within_availability, load_windows
from app.services.conflicts import Schedule, ensure_no_conflict, load_commitments
from app.services.integrity import translate_integrity_error
from app.services.substitutions import resolve_acting_faculty, substitutions_covering

logger = logging.getLogger(__name__)

UPCOMING = "upcoming"
ACTIVE = "active"
COMPLETED = "completed"


def derive_status(today: date, start_date: date, end_date: date) -> str:
    if today < start_date:
        return UPCOMING
    if today > end_date:
        return COMPLETED
    return ACTIVE


def _validate_references(db: Session, payload: BatchWrite, *, batch_id: str | None = None) -> None:
    duplicate = db.execute(select(Batch.id).where(Batch.name == payload.name)).scalar_one_or_none()
    if duplicate is not None and duplicate != batch_id:
        raise IntegrityViolation(f"A batch with the name '{payload.name}' already exists.", 409)
    if payload.faculty_id and db.get(Faculty, payload.faculty_id) is None:
        raise ValidationError(f"Faculty with ID {payload.faculty_id} does not exist.")
    if payload.skill_id and db.get(Skill, payload.skill_id) is None:
        raise ValidationError(f"Skill with ID {payload.skill_id} does not exist.")
    if payload.student_ids:
        wanted = set(payload.student_ids)
        found = set(db.execute(select(Student.id).where(Student.id.in_(wanted))).scalars())
        if found != wanted:
            raise ValidationError("One or more student IDs are invalid.")
        if payload.max_students is not None and len(wanted) > payload.max_students:
            raise ValidationError("Number of students exceeds the batch capacity.")


def _check_schedule(db: Session, payload: BatchWrite, today: date, *, batch_id: str | None = None) -> None:
    if not payload.faculty_id:
        return
    ensure_within_availability(
        load_windows(db, payload.faculty_id),
        payload.days_of_week,
        payload.start_time,
        payload.end_time,
    )
    candidate = Schedule(
        days_of_week=payload.days_of_week,
        start_time=payload.start_time,
        end_time=payload.end_time,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    ensure_no_conflict(candidate, load_commitments(db, payload.faculty_id, today, exclude_batch_id=batch_id))


def _replace_students(db: Session, batch_id: str, student_ids: Sequence[str]) -> None:
    db.execute(delete(BatchStudent).where(BatchStudent.batch_id == batch_id))
    for student_id in dict.fromkeys(student_ids):
        db.add(BatchStudent(batch_id=batch_id, student_id=student_id))


def _commit(db: Session, name: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise translate_integrity_error(
            exc,
            unique_message=f"A batch with the name '{name}' already exists.",
            foreign_key_message="A referenced faculty, skill or student does not exist.",
        ) from exc


def create_batch(db: Session, payload: BatchWrite, today: date) -> Batch:
    _validate_references(db, payload)
    _check_schedule(db, payload, today)

    values = payload.model_dump(exclude={"student_ids"})
    batch = Batch(**values)
    db.add(batch)
    db.flush()
    if payload.student_ids:
        _replace_students(db, batch.id, payload.student_ids)
    _commit(db, payload.name)
    db.refresh(batch)
    logger.info("batch_created id=%s faculty_id=%s", batch.id, batch.faculty_id)
    return batch


def update_batch(db: Session, batch_id: str, payload: BatchWrite, today: date) -> Batch:
    batch = db.get(Batch, batch_id)
    if batch is None:
        raise NotFoundError("Batch", batch_id)
    _validate_references(db, payload, batch_id=batch.id)
    _check_schedule(db, payload, today, batch_id=batch.id)

    for key, value in payload.model_dump(exclude={"student_ids"}).items():
        setattr(batch, key, value)
    if payload.student_ids is not None:
        _replace_students(db, batch.id, payload.student_ids)
    _commit(db, payload.name)
    db.refresh(batch)
    return batch


def delete_batch(db: Session, batch_id: str) -> str:
    batch = db.get(Batch, batch_id)
    if batch is None:
        raise NotFoundError("Batch", batch_id)
    name = batch.name
    db.execute(delete(BatchStudent).where(BatchStudent.batch_id == batch.id))
    db.execute(delete(FacultySubstitution).where(FacultySubstitution.batch_id == batch.id))
    db.execute(delete(StudentAttendance).where(StudentAttendance.batch_id == batch.id))
    db.delete(batch)
    db.commit()
    return name


def build_batch_views(db: Session, batches: Sequence[Batch], today: date) -> list[BatchOut]:
    """Render batches with status, student counts and today's substitution overlay."""
    if not batches:
        return []
    batch_ids = [batch.id for batch in batches]
    counts = dict(
        db.execute(
            select(BatchStudent.batch_id, func.count(BatchStudent.id))
            .where(BatchStudent.batch_id.in_(batch_ids))
            .group_by(BatchStudent.batch_id)
        ).all()
    )
    substitutions = substitutions_covering(db, today, batch_ids)
    faculty_ids = {batch.faculty_id for batch in batches if batch.faculty_id}
    faculty_ids.update(item.substitute_faculty_id for item in substitutions)
    faculty_by_id = {
        item.id: item for item in db.execute(select(Faculty).where(Faculty.id.in_(faculty_ids))).scalars()
    } if faculty_ids else {}
    skill_ids = {batch.skill_id for batch in batches if batch.skill_id}
    skill_by_id = {
        item.id: item for item in db.execute(select(Skill).where(Skill.id.in_(skill_ids))).scalars()
    } if skill_ids else {}

    def faculty_ref(faculty_id: str | None) -> FacultyRef | None:
        faculty = faculty_by_id.get(faculty_id) if faculty_id else None
        return FacultyRef(id=faculty.id, name=faculty.name) if faculty is not None else None

    views: list[BatchOut] = []
    for batch in batches:
        acting = resolve_acting_faculty(batch, substitutions, today)
        skill = skill_by_id.get(batch.skill_id) if batch.skill_id else None
        views.append(
            BatchOut(
                id=batch.id,
                name=batch.name,
                description=batch.description,
                start_date=batch.start_date,
                end_date=batch.end_date,
                start_time=batch.start_time,
                end_time=batch.end_time,
                days_of_week=list(batch.days_of_week or []),
                max_students=batch.max_students,
                status=derive_status(today, batch.start_date, batch.end_date),
                faculty_id=acting.faculty_id,
                faculty=faculty_ref(acting.faculty_id),
                skill_id=batch.skill_id,
                skill=SkillOut(id=skill.id, name=skill.name) if skill is not None else None,
                student_count=counts.get(batch.id, 0),
                is_substituted=acting.is_substituted,
                original_faculty=faculty_ref(acting.original_faculty_id) if acting.is_substituted else None,
                substitution_id=acting.substitution.id if acting.substitution is not None else None,
            )
        )
    return views


def list_batches(db: Session, today: date, *, user: User) -> list[BatchOut]:
    batches = list(db.execute(select(Batch).order_by(Batch.start_date, Batch.name)).scalars())
    views = build_batch_views(db, batches, today)
    if user.role == UserRole.faculty:
        # Faculty users see the batches they are acting for today.
        return [view for view in views if user.faculty_id and view.faculty_id == user.faculty_id]
    return views


def batch_view(db: Session, batch: Batch, today: date) -> BatchOut:
    return build_batch_views(db, [batch], today)[0]


def active_students_count(db: Session, today: date) -> int:
    return db.execute(
        select(func.count(func.distinct(BatchStudent.student_id)))
        .join(Batch, Batch.id == BatchStudent.batch_id)
        .where(Batch.start_date <= today, Batch.end_date >= today)
    ).scalar_one()
