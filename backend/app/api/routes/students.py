from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_roles
from app.models.attendance import StudentAttendance
from app.models.batch import Batch, BatchStudent
from app.models.faculty import Faculty
from app.models.student import Student
from app.models.user import User, UserRole
from app.schemas.common import FacultyRef
from app.schemas.student import (
    StudentBatches,
    StudentBatchOut,
    StudentCreate,
    StudentOut,
    StudentPage,
    StudentUpdate,
)
from app.services.audit import log_activity

router = APIRouter()


def _ensure_admission_number_free(db: Session, admission_number: str, student_id: str | None = None) -> None:
    existing = db.execute(
        select(Student.id).where(Student.admission_number == admission_number)
    ).scalar_one_or_none()
    if existing is not None and existing != student_id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"A student with admission number '{admission_number}' already exists.",
        )


@router.get("", response_model=StudentPage)
def list_students(
    search: str | None = Query(default=None, max_length=200),
    faculty_id: str | None = Query(default=None),
    unassigned: bool = Query(default=False),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=200, ge=1, le=1000),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StudentPage:
    query = select(Student)
    if faculty_id:
        taught = (
            select(BatchStudent.student_id)
            .join(Batch, Batch.id == BatchStudent.batch_id)
            .where(Batch.faculty_id == faculty_id)
        )
        query = query.where(Student.id.in_(taught))
    elif unassigned:
        query = query.where(Student.id.not_in(select(BatchStudent.student_id)))
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(func.lower(Student.name).like(pattern), func.lower(Student.admission_number).like(pattern))
        )

    total = db.execute(select(func.count()).select_from(query.subquery())).scalar_one()
    students = db.execute(
        query.order_by(Student.name, Student.id).offset((page - 1) * limit).limit(limit)
    ).scalars()
    return StudentPage(students=[StudentOut.model_validate(item) for item in students], count=total)


@router.post("", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(
    payload: StudentCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> StudentOut:
    _ensure_admission_number_free(db, payload.admission_number)
    student = Student(**payload.model_dump())
    db.add(student)
    db.commit()
    db.refresh(student)
    log_activity(db, user=current_user, action="created", item=f"student {student.name}", entity_type="student")
    return student


@router.put("/{student_id}", response_model=StudentOut)
def update_student(
    student_id: str,
    payload: StudentUpdate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> StudentOut:
    student = db.get(Student, student_id)
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found.")
    data = payload.model_dump(exclude_unset=True)
    if data.get("admission_number"):
        _ensure_admission_number_free(db, data["admission_number"], student_id)
    for key, value in data.items():
        if key in {"name", "admission_number"} and value is None:
            continue
        setattr(student, key, value)
    db.commit()
    db.refresh(student)
    log_activity(db, user=current_user, action="updated", item=f"student {student.name}", entity_type="student")
    return student


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(
    student_id: str,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> None:
    student = db.get(Student, student_id)
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found.")
    name = student.name
    db.execute(delete(BatchStudent).where(BatchStudent.student_id == student_id))
    db.execute(delete(StudentAttendance).where(StudentAttendance.student_id == student_id))
    db.delete(student)
    db.commit()
    log_activity(db, user=current_user, action="deleted", item=f"student {name}", entity_type="student")


@router.get("/{student_id}/batches", response_model=StudentBatches)
def list_student_batches(
    student_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StudentBatches:
    if db.get(Student, student_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found.")
    rows = db.execute(
        select(Batch, Faculty)
        .join(BatchStudent, BatchStudent.batch_id == Batch.id)
        .outerjoin(Faculty, Faculty.id == Batch.faculty_id)
        .where(BatchStudent.student_id == student_id)
        .order_by(Batch.start_date, Batch.name)
    ).all()
    return StudentBatches(
        batches=[
            StudentBatchOut(
                id=batch.id,
                name=batch.name,
                start_date=batch.start_date,
                end_date=batch.end_date,
                start_time=batch.start_time,
                end_time=batch.end_time,
                days_of_week=list(batch.days_of_week or []),
                faculty=FacultyRef(id=faculty.id, name=faculty.name) if faculty is not None else None,
            )
            for batch, faculty in rows
        ]
    )
