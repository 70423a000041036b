from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_clock, get_db, require_roles
from app.core.clock import Clock
from app.models.batch import Batch
from app.models.faculty import Faculty
from app.models.user import User, UserRole
from app.schemas.batch import BatchOut
from app.schemas.common import FacultyRef, MessageOut
from app.schemas.substitution import (
    BatchMerge,
    BatchRef,
    PermanentAssignment,
    SubstitutionListItem,
    SubstitutionOut,
    TemporarySubstitutionCreate,
    TemporarySubstitutionUpdate,
)
from app.services import substitutions as substitution_service
from app.services.audit import log_activity
from app.services.batches import batch_view

router = APIRouter()


@router.get("/temporary", response_model=list[SubstitutionListItem])
def list_substitutions(
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> list[SubstitutionListItem]:
    items = substitution_service.list_upcoming_substitutions(db, clock.today())
    if not items:
        return []
    batch_ids = {item.batch_id for item in items}
    faculty_ids = {item.original_faculty_id for item in items} | {item.substitute_faculty_id for item in items}
    batches = {batch.id: batch for batch in db.execute(select(Batch).where(Batch.id.in_(batch_ids))).scalars()}
    faculty = {row.id: row for row in db.execute(select(Faculty).where(Faculty.id.in_(faculty_ids))).scalars()}

    def ref(faculty_id: str) -> FacultyRef | None:
        row = faculty.get(faculty_id)
        return FacultyRef(id=row.id, name=row.name) if row is not None else None

    return [
        SubstitutionListItem(
            id=item.id,
            start_date=item.start_date,
            end_date=item.end_date,
            notes=item.notes,
            batch=BatchRef(id=item.batch_id, name=batches[item.batch_id].name) if item.batch_id in batches else None,
            original_faculty=ref(item.original_faculty_id),
            substitute_faculty=ref(item.substitute_faculty_id),
        )
        for item in items
    ]


@router.post("/temporary", response_model=SubstitutionOut, status_code=status.HTTP_201_CREATED)
def create_substitution(
    payload: TemporarySubstitutionCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> SubstitutionOut:
    substitution, batch = substitution_service.create_temporary_substitution(
        db,
        batch_id=payload.batch_id,
        substitute_faculty_id=payload.substitute_faculty_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        notes=payload.notes,
        today=clock.today(),
    )
    result = SubstitutionOut.model_validate(substitution)
    log_activity(
        db,
        user=current_user,
        action="created",
        item=f"temporary substitution for batch {batch.name}",
        entity_type="substitution",
    )
    return result


@router.put("/temporary/{substitution_id}", response_model=SubstitutionOut)
def update_substitution(
    substitution_id: str,
    payload: TemporarySubstitutionUpdate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> SubstitutionOut:
    changes = payload.model_dump(exclude_unset=True)
    substitution, batch = substitution_service.update_temporary_substitution(
        db,
        substitution_id,
        today=clock.today(),
        **changes,
    )
    result = SubstitutionOut.model_validate(substitution)
    log_activity(
        db,
        user=current_user,
        action="updated",
        item=f"substitution for batch {batch.name}",
        entity_type="substitution",
    )
    return result


@router.delete("/temporary/{substitution_id}", response_model=MessageOut)
def cancel_substitution(
    substitution_id: str,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> MessageOut:
    batch_name = substitution_service.cancel_temporary_substitution(db, substitution_id)
    log_activity(
        db,
        user=current_user,
        action="deleted",
        item=f"substitution for batch {batch_name}",
        entity_type="substitution",
    )
    return MessageOut(message="Substitution cancelled successfully.")


@router.post("/assign", response_model=BatchOut)
def assign_faculty(
    payload: PermanentAssignment,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> BatchOut:
    today = clock.today()
    batch = substitution_service.assign_permanent_faculty(
        db,
        batch_id=payload.batch_id,
        faculty_id=payload.faculty_id,
        today=today,
    )
    view = batch_view(db, batch, today)
    log_activity(
        db,
        user=current_user,
        action="updated",
        item=f"Permanently reassigned faculty for batch {view.name}",
        entity_type="batch",
    )
    return view


@router.post("/merge", response_model=MessageOut)
def merge_batches(
    payload: BatchMerge,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> MessageOut:
    source_name, target_name = substitution_service.merge_batches(
        db,
        source_batch_id=payload.source_batch_id,
        target_batch_id=payload.target_batch_id,
    )
    log_activity(
        db,
        user=current_user,
        action="merged",
        item=f"batch {source_name} into {target_name}",
        entity_type="batch",
    )
    return MessageOut(message="Batches merged successfully")
