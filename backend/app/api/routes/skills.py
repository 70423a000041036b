from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_roles
from app.models.skill import Skill
from app.models.user import User, UserRole
from app.schemas.skill import SkillCreate, SkillOut
from app.services.audit import log_activity

router = APIRouter()


@router.get("", response_model=list[SkillOut])
def list_skills(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[SkillOut]:
    return list(db.execute(select(Skill).order_by(Skill.name)).scalars())


@router.post("", response_model=SkillOut, status_code=status.HTTP_201_CREATED)
def create_skill(
    payload: SkillCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> SkillOut:
    existing = db.execute(select(Skill).where(func.lower(Skill.name) == payload.name.lower())).scalar_one_or_none()
    if existing is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Skill '{payload.name}' already exists.")
    skill = Skill(name=payload.name)
    db.add(skill)
    db.commit()
    db.refresh(skill)
    log_activity(db, user=current_user, action="created", item=f"skill {skill.name}", entity_type="skill")
    return skill
