from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_roles
from app.core.config import get_settings
from app.models.activity_log import ActivityLog
from app.models.user import User, UserRole
from app.schemas.activity import ActivityLogOut

router = APIRouter()


@router.get("/activities", response_model=list[ActivityLogOut])
def list_activity_logs(
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> list[ActivityLogOut]:
    limit = get_settings().activity_log_limit
    query = select(ActivityLog).order_by(ActivityLog.created_at.desc(), ActivityLog.id).limit(limit)
    return list(db.execute(query).scalars())
