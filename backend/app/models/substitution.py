import uuid
from datetime import date, datetime

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class FacultySubstitution(Base):
    """Temporary override of who teaches a batch between two dates (inclusive).

    On PostgreSQL the table also carries an exclusion constraint that forbids
    overlapping date ranges for the same batch (see ``app.db.bootstrap``).
    """

    __tablename__ = "faculty_substitutions"
    __table_args__ = (
        CheckConstraint("substitute_faculty_id <> original_faculty_id", name="ck_substitution_distinct_faculty"),
        CheckConstraint("start_date <= end_date", name="ck_substitution_date_order"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    batch_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("batches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    original_faculty_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("faculty.id", ondelete="CASCADE"), nullable=False
    )
    substitute_faculty_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("faculty.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
