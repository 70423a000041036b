from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_roles
from app.models.user import User, UserRole
from app.schemas.attendance import (
    AttendanceOut,
    AttendanceUpsert,
    BatchAttendanceReport,
    DailyAttendanceOut,
    FacultyAttendanceReport,
    OverallAttendanceReport,
)
from app.schemas.student import StudentOut
from app.services import attendance as attendance_service
from app.services.audit import log_activity

router = APIRouter()


def _require_range(start_date: date | None, end_date: date | None) -> tuple[date, date]:
    if start_date is None or end_date is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Start date and end date are required.")
    if end_date < start_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End date must be on or after start date.")
    return start_date, end_date


@router.post("", response_model=list[AttendanceOut], status_code=status.HTTP_201_CREATED)
def save_attendance(
    payload: AttendanceUpsert,
    current_user: User = Depends(require_roles(UserRole.admin, UserRole.faculty)),
    db: Session = Depends(get_db),
) -> list[AttendanceOut]:
    records = attendance_service.upsert_attendance(db, payload.batch_id, payload.date, payload.attendance)
    result = [AttendanceOut.model_validate(record) for record in records]
    log_activity(
        db,
        user=current_user,
        action="updated",
        item=f"attendance for batch {payload.batch_id} on {payload.date.isoformat()}",
        entity_type="attendance",
    )
    return result


@router.get("/batch/{batch_id}/daily", response_model=list[DailyAttendanceOut])
def get_daily_attendance(
    batch_id: str,
    on_date: date = Query(alias="date"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[DailyAttendanceOut]:
    return [
        DailyAttendanceOut(
            id=record.id,
            batch_id=record.batch_id,
            student_id=record.student_id,
            date=record.date,
            is_present=record.is_present,
            student=StudentOut.model_validate(student) if student is not None else None,
        )
        for record, student in attendance_service.daily_attendance(db, batch_id, on_date)
    ]


@router.get("/reports/batch/{batch_id}", response_model=BatchAttendanceReport)
def get_batch_report(
    batch_id: str,
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> BatchAttendanceReport:
    start, end = _require_range(start_date, end_date)
    students, by_date = attendance_service.batch_report(db, batch_id, start, end)
    return BatchAttendanceReport(
        students=[StudentOut.model_validate(student) for student in students],
        attendance_by_date=by_date,
    )


@router.get("/reports/faculty/{faculty_id}", response_model=FacultyAttendanceReport)
def get_faculty_report(
    faculty_id: str,
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FacultyAttendanceReport:
    if current_user.role != UserRole.admin and current_user.faculty_id != faculty_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    start, end = _require_range(start_date, end_date)
    return FacultyAttendanceReport.model_validate(attendance_service.faculty_report(db, faculty_id, start, end))


@router.get("/reports/overall", response_model=OverallAttendanceReport)
def get_overall_report(
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> OverallAttendanceReport:
    start, end = _require_range(start_date, end_date)
    return OverallAttendanceReport.model_validate(attendance_service.overall_report(db, start, end))
