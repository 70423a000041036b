from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.core.config import get_settings
from app.models.user import User
from app.schemas.common import FacultyRef
from app.schemas.free_slots import DaySlotsOut, FacultyFreeSlotsOut
from app.services.free_slots import load_free_slots

router = APIRouter()


@router.get("", response_model=list[FacultyFreeSlotsOut])
def get_free_slots(
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    faculty_id: str | None = Query(default=None, alias="faculty"),
    skill_id: str | None = Query(default=None, alias="skill"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[FacultyFreeSlotsOut]:
    if start_date is None or end_date is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please select a start and end date.")
    if end_date < start_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End date must be on or after start date.")
    max_days = get_settings().free_slots_max_days
    if (end_date - start_date).days + 1 > max_days:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Date range cannot exceed {max_days} days.",
        )

    results = load_free_slots(db, start_date, end_date, faculty_id=faculty_id or None, skill_id=skill_id or None)
    return [
        FacultyFreeSlotsOut(
            faculty=FacultyRef(id=item.faculty_id, name=item.faculty_name),
            slots=[DaySlotsOut(date=day.date, time=day.time) for day in item.slots],
        )
        for item in results
    ]
