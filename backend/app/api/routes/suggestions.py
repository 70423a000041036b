from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_roles
from app.models.user import User, UserRole
from app.schemas.suggestion import SuggestFacultyRequest, SuggestFacultyResponse
from app.services.suggestions import suggest_faculty

router = APIRouter()


@router.post("/suggest-faculty", response_model=SuggestFacultyResponse)
def suggest_faculty_for_batch(
    payload: SuggestFacultyRequest,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> SuggestFacultyResponse:
    return SuggestFacultyResponse(suggestions=suggest_faculty(db, payload))
