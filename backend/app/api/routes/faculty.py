from collections.abc import Sequence
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from app.api.deps import get_clock, get_current_user, get_db, require_roles
from app.core.clock import Clock
from app.core.config import get_settings
from app.core.exceptions import SchedulingConflict
from app.models.batch import Batch
from app.models.faculty import Faculty, FacultyAvailability
from app.models.skill import FacultySkill, Skill
from app.models.substitution import FacultySubstitution
from app.models.user import User, UserRole
from app.schemas.faculty import (
    AvailabilityReplace,
    AvailabilityWindowIn,
    AvailabilityWindowOut,
    FacultyCreate,
    FacultyOut,
    FacultyUpdate,
)
from app.schemas.skill import SkillOut
from app.services.audit import log_activity
from app.services.availability import find_availability_removal_conflict, load_windows
from app.services.intervals import DAY_NAMES

router = APIRouter()


def _day_order(window: FacultyAvailability) -> int:
    return DAY_NAMES.index(window.day_of_week) if window.day_of_week in DAY_NAMES else len(DAY_NAMES)


def _faculty_out(db: Session, faculties: Sequence[Faculty]) -> list[FacultyOut]:
    if not faculties:
        return []
    faculty_ids = [item.id for item in faculties]
    skills: dict[str, list[SkillOut]] = {key: [] for key in faculty_ids}
    for faculty_id, skill in db.execute(
        select(FacultySkill.faculty_id, Skill)
        .join(Skill, Skill.id == FacultySkill.skill_id)
        .where(FacultySkill.faculty_id.in_(faculty_ids))
        .order_by(Skill.name)
    ).all():
        skills[faculty_id].append(SkillOut(id=skill.id, name=skill.name))
    windows: dict[str, list[FacultyAvailability]] = {key: [] for key in faculty_ids}
    for window in db.execute(
        select(FacultyAvailability).where(FacultyAvailability.faculty_id.in_(faculty_ids))
    ).scalars():
        windows[window.faculty_id].append(window)

    return [
        FacultyOut(
            id=item.id,
            name=item.name,
            email=item.email,
            phone_number=item.phone_number,
            employment_type=item.employment_type,
            is_active=item.is_active,
            skills=skills[item.id],
            availability=[
                AvailabilityWindowOut.model_validate(window) for window in sorted(windows[item.id], key=_day_order)
            ],
        )
        for item in faculties
    ]


def _get_faculty_or_404(db: Session, faculty_id: str) -> Faculty:
    faculty = db.get(Faculty, faculty_id)
    if faculty is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faculty not found.")
    return faculty


def _ensure_skills_exist(db: Session, skill_ids: Sequence[str]) -> None:
    wanted = set(skill_ids)
    if not wanted:
        return
    found = set(db.execute(select(Skill.id).where(Skill.id.in_(wanted))).scalars())
    if found != wanted:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="One or more skill IDs are invalid.")


def _ensure_email_free(db: Session, email: str | None, faculty_id: str | None = None) -> None:
    if not email:
        return
    existing = db.execute(select(Faculty.id).where(Faculty.email == email)).scalar_one_or_none()
    if existing is not None and existing != faculty_id:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Faculty email already exists")


def _replace_skills(db: Session, faculty_id: str, skill_ids: Sequence[str]) -> None:
    db.execute(delete(FacultySkill).where(FacultySkill.faculty_id == faculty_id))
    for skill_id in dict.fromkeys(skill_ids):
        db.add(FacultySkill(faculty_id=faculty_id, skill_id=skill_id))


def _replace_windows(db: Session, faculty_id: str, windows: Sequence[AvailabilityWindowIn]) -> None:
    db.execute(delete(FacultyAvailability).where(FacultyAvailability.faculty_id == faculty_id))
    for window in windows:
        db.add(
            FacultyAvailability(
                faculty_id=faculty_id,
                day_of_week=window.day_of_week,
                start_time=window.start_time,
                end_time=window.end_time,
            )
        )


@router.get("", response_model=list[FacultyOut])
def list_faculty(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[FacultyOut]:
    faculties = list(db.execute(select(Faculty).order_by(Faculty.name, Faculty.id)).scalars())
    return _faculty_out(db, faculties)


@router.post("", response_model=FacultyOut, status_code=status.HTTP_201_CREATED)
def create_faculty(
    payload: FacultyCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> FacultyOut:
    _ensure_email_free(db, payload.email)
    _ensure_skills_exist(db, payload.skill_ids)
    faculty = Faculty(**payload.model_dump(exclude={"skill_ids", "availability"}))
    db.add(faculty)
    db.flush()
    _replace_skills(db, faculty.id, payload.skill_ids)
    if payload.availability:
        _replace_windows(db, faculty.id, payload.availability)
    db.commit()
    db.refresh(faculty)
    log_activity(db, user=current_user, action="created", item=f"faculty {faculty.name}", entity_type="faculty")
    return _faculty_out(db, [faculty])[0]


@router.put("/{faculty_id}", response_model=FacultyOut)
def update_faculty(
    faculty_id: str,
    payload: FacultyUpdate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> FacultyOut:
    faculty = _get_faculty_or_404(db, faculty_id)
    data = payload.model_dump(exclude_unset=True)
    skill_ids = data.pop("skill_ids", None)
    if "email" in data:
        _ensure_email_free(db, data["email"], faculty_id)
    if skill_ids is not None:
        _ensure_skills_exist(db, skill_ids)

    for key, value in data.items():
        if key in {"name", "employment_type", "is_active"} and value is None:
            continue
        setattr(faculty, key, value)
    if skill_ids is not None:
        _replace_skills(db, faculty.id, skill_ids)
    db.commit()
    db.refresh(faculty)
    log_activity(db, user=current_user, action="updated", item=f"faculty {faculty.name}", entity_type="faculty")
    return _faculty_out(db, [faculty])[0]


@router.delete("/{faculty_id}")
def delete_faculty(
    faculty_id: str,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> dict:
    faculty = _get_faculty_or_404(db, faculty_id)
    name = faculty.name
    assigned_batches = list(db.execute(select(Batch).where(Batch.faculty_id == faculty_id)).scalars())
    for batch in assigned_batches:
        batch.faculty_id = None
    db.execute(
        delete(FacultySubstitution).where(
            or_(
                FacultySubstitution.original_faculty_id == faculty_id,
                FacultySubstitution.substitute_faculty_id == faculty_id,
            )
        )
    )
    db.execute(delete(FacultySkill).where(FacultySkill.faculty_id == faculty_id))
    db.execute(delete(FacultyAvailability).where(FacultyAvailability.faculty_id == faculty_id))
    db.delete(faculty)
    db.commit()
    log_activity(db, user=current_user, action="deleted", item=f"faculty {name}", entity_type="faculty")
    return {"success": True, "unassigned_batch_count": len(assigned_batches)}


@router.get("/{faculty_id}/availability", response_model=list[AvailabilityWindowOut])
def get_faculty_availability(
    faculty_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[AvailabilityWindowOut]:
    _get_faculty_or_404(db, faculty_id)
    return sorted(load_windows(db, faculty_id), key=_day_order)


@router.put("/{faculty_id}/availability", response_model=list[AvailabilityWindowOut])
def replace_faculty_availability(
    faculty_id: str,
    payload: AvailabilityReplace,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> list[AvailabilityWindowOut]:
    if current_user.role != UserRole.admin and current_user.faculty_id != faculty_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    faculty = _get_faculty_or_404(db, faculty_id)

    today = clock.today()
    horizon = today + timedelta(days=get_settings().availability_guard_days)
    upcoming = list(
        db.execute(
            select(Batch).where(
                Batch.faculty_id == faculty_id,
                Batch.start_date <= horizon,
                Batch.end_date >= today,
            )
        ).scalars()
    )
    message = find_availability_removal_conflict(upcoming, payload.availability)
    if message is not None:
        raise SchedulingConflict(message)

    _replace_windows(db, faculty_id, payload.availability)
    db.commit()
    log_activity(
        db,
        user=current_user,
        action="updated",
        item=f"availability for faculty {faculty.name}",
        entity_type="faculty_availability",
    )
    return sorted(load_windows(db, faculty_id), key=_day_order)
