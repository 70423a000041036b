from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import AppError, NotFoundError, ValidationError
from app.models.attendance import StudentAttendance
from app.models.batch import Batch, BatchStudent
from app.models.faculty import Faculty
from app.models.student import Student
from app.models.substitution import FacultySubstitution
from app.schemas.attendance import AttendanceMark
from app.services.integrity import translate_integrity_error
from app.services.substitutions import resolve_acting_faculty


@dataclass
class SessionTally:
    """One batch meeting on one date, credited to the faculty who taught it."""

    batch_id: str
    batch_name: str
    date: date
    faculty_id: str | None
    present: int
    absent: int


def upsert_attendance(
    db: Session,
    batch_id: str,
    on_date: date,
    marks: Sequence[AttendanceMark],
) -> list[StudentAttendance]:
    if db.get(Batch, batch_id) is None:
        raise NotFoundError("Batch", batch_id)
    enrolled = set(db.execute(select(BatchStudent.student_id).where(BatchStudent.batch_id == batch_id)).scalars())
    marked = {mark.student_id: mark.is_present for mark in marks}
    if not set(marked) <= enrolled:
        raise ValidationError("One or more students are not enrolled in this batch.")

    existing = {
        record.student_id: record
        for record in db.execute(
            select(StudentAttendance).where(
                StudentAttendance.batch_id == batch_id,
                StudentAttendance.date == on_date,
                StudentAttendance.student_id.in_(list(marked)),
            )
        ).scalars()
    }
    records: list[StudentAttendance] = []
    for student_id, is_present in marked.items():
        record = existing.get(student_id)
        if record is None:
            record = StudentAttendance(batch_id=batch_id, student_id=student_id, date=on_date, is_present=is_present)
            db.add(record)
        else:
            record.is_present = is_present
        records.append(record)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise translate_integrity_error(
            exc,
            unique_message="Attendance for this batch and date was saved concurrently; please retry.",
        ) from exc
    for record in records:
        db.refresh(record)
    return records


def daily_attendance(db: Session, batch_id: str, on_date: date) -> list[tuple[StudentAttendance, Student | None]]:
    rows = db.execute(
        select(StudentAttendance, Student)
        .outerjoin(Student, Student.id == StudentAttendance.student_id)
        .where(StudentAttendance.batch_id == batch_id, StudentAttendance.date == on_date)
        .order_by(Student.name)
    ).all()
    return [(record, student) for record, student in rows]


def batch_report(db: Session, batch_id: str, start: date, end: date) -> tuple[list[Student], dict[str, list[dict]]]:
    if db.get(Batch, batch_id) is None:
        raise NotFoundError("Batch", batch_id)
    students = list(
        db.execute(
            select(Student)
            .join(BatchStudent, BatchStudent.student_id == Student.id)
            .where(BatchStudent.batch_id == batch_id)
            .order_by(Student.name)
        ).scalars()
    )
    if not students:
        raise AppError("No students found for this batch.", status_code=404)

    by_date: dict[str, list[dict]] = defaultdict(list)
    for record in db.execute(
        select(StudentAttendance)
        .where(
            StudentAttendance.batch_id == batch_id,
            StudentAttendance.date >= start,
            StudentAttendance.date <= end,
        )
        .order_by(StudentAttendance.date)
    ).scalars():
        by_date[record.date.isoformat()].append({"student_id": record.student_id, "is_present": record.is_present})
    return students, dict(by_date)


def session_tallies(db: Session, start: date, end: date) -> list[SessionTally]:
    """Per (batch, date) present/absent counts, attributed to the acting faculty."""
    present = func.sum(case((StudentAttendance.is_present.is_(True), 1), else_=0))
    rows = db.execute(
        select(StudentAttendance.batch_id, StudentAttendance.date, present, func.count(StudentAttendance.id))
        .where(StudentAttendance.date >= start, StudentAttendance.date <= end)
        .group_by(StudentAttendance.batch_id, StudentAttendance.date)
        .order_by(StudentAttendance.date, StudentAttendance.batch_id)
    ).all()
    if not rows:
        return []

    batch_ids = {row[0] for row in rows}
    batches = {batch.id: batch for batch in db.execute(select(Batch).where(Batch.id.in_(batch_ids))).scalars()}
    substitutions = list(
        db.execute(
            select(FacultySubstitution).where(
                FacultySubstitution.batch_id.in_(batch_ids),
                FacultySubstitution.start_date <= end,
                FacultySubstitution.end_date >= start,
            )
        ).scalars()
    )

    tallies: list[SessionTally] = []
    for batch_id, on_date, present_count, total in rows:
        batch = batches.get(batch_id)
        if batch is None:
            continue
        acting = resolve_acting_faculty(batch, substitutions, on_date)
        present_count = int(present_count or 0)
        tallies.append(
            SessionTally(
                batch_id=batch.id,
                batch_name=batch.name,
                date=on_date,
                faculty_id=acting.faculty_id,
                present=present_count,
                absent=int(total) - present_count,
            )
        )
    return tallies


def summarize_faculty(faculty: Faculty, tallies: Sequence[SessionTally]) -> dict:
    own = [tally for tally in tallies if tally.faculty_id == faculty.id]
    per_batch: dict[str, dict] = {}
    for tally in own:
        entry = per_batch.setdefault(
            tally.batch_id,
            {"batch_id": tally.batch_id, "batch_name": tally.batch_name, "sessions": 0, "present": 0, "absent": 0},
        )
        entry["sessions"] += 1
        entry["present"] += tally.present
        entry["absent"] += tally.absent
    return {
        "faculty": {"id": faculty.id, "name": faculty.name},
        "sessions": len(own),
        "present": sum(tally.present for tally in own),
        "absent": sum(tally.absent for tally in own),
        "batches": sorted(per_batch.values(), key=lambda item: item["batch_name"]),
    }


def faculty_report(db: Session, faculty_id: str, start: date, end: date) -> dict:
    faculty = db.get(Faculty, faculty_id)
    if faculty is None:
        raise NotFoundError("Faculty", faculty_id)
    return summarize_faculty(faculty, session_tallies(db, start, end))


def overall_report(db: Session, start: date, end: date) -> dict:
    tallies = session_tallies(db, start, end)
    faculty_ids = {tally.faculty_id for tally in tallies if tally.faculty_id}
    faculties = (
        list(db.execute(select(Faculty).where(Faculty.id.in_(faculty_ids)).order_by(Faculty.name)).scalars())
        if faculty_ids
        else []
    )
    return {
        "faculty": [summarize_faculty(faculty, tallies) for faculty in faculties],
        "sessions": len(tallies),
        "present": sum(tally.present for tally in tallies),
        "absent": sum(tally.absent for tally in tallies),
    }
