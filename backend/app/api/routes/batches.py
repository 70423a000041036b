from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_clock, get_current_user, get_db, require_roles
from app.core.clock import Clock
from app.models.batch import Batch, BatchStudent
from app.models.student import Student
from app.models.user import User, UserRole
from app.schemas.batch import ActiveStudentsCount, BatchCreate, BatchOut, BatchStudentOut, BatchUpdate
from app.services import batches as batch_service
from app.services.audit import log_activity

router = APIRouter()


@router.get("", response_model=list[BatchOut])
def list_batches(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> list[BatchOut]:
    return batch_service.list_batches(db, clock.today(), user=current_user)


@router.get("/active-students/count", response_model=ActiveStudentsCount)
def count_active_students(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ActiveStudentsCount:
    return ActiveStudentsCount(count=batch_service.active_students_count(db, clock.today()))


@router.post("", response_model=BatchOut, status_code=status.HTTP_201_CREATED)
def create_batch(
    payload: BatchCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> BatchOut:
    today = clock.today()
    batch = batch_service.create_batch(db, payload, today)
    view = batch_service.batch_view(db, batch, today)
    log_activity(db, user=current_user, action="created", item=f"batch {view.name}", entity_type="batch")
    return view


@router.put("/{batch_id}", response_model=BatchOut)
def update_batch(
    batch_id: str,
    payload: BatchUpdate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> BatchOut:
    today = clock.today()
    batch = batch_service.update_batch(db, batch_id, payload, today)
    view = batch_service.batch_view(db, batch, today)
    log_activity(db, user=current_user, action="updated", item=f"batch {view.name}", entity_type="batch")
    return view


@router.delete("/{batch_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_batch(
    batch_id: str,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> None:
    name = batch_service.delete_batch(db, batch_id)
    log_activity(db, user=current_user, action="deleted", item=f"batch {name}", entity_type="batch")


@router.get("/{batch_id}/students", response_model=list[BatchStudentOut])
def list_batch_students(
    batch_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[BatchStudentOut]:
    if db.get(Batch, batch_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Batch not found.")
    query = (
        select(Student)
        .join(BatchStudent, BatchStudent.student_id == Student.id)
        .where(BatchStudent.batch_id == batch_id)
        .order_by(Student.name)
    )
    return list(db.execute(query).scalars())
