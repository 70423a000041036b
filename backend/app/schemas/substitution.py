from datetime import date

from pydantic import BaseModel, Field, model_validator

from app.schemas.common import FacultyRef, RequestModel


class TemporarySubstitutionCreate(RequestModel):
    batch_id: str = Field(min_length=1)
    substitute_faculty_id: str = Field(min_length=1)
    start_date: date
    end_date: date
    notes: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def validate_dates(self) -> "TemporarySubstitutionCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class TemporarySubstitutionUpdate(RequestModel):
    substitute_faculty_id: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    notes: str | None = Field(default=None, max_length=2000)


class SubstitutionOut(BaseModel):
    id: str
    batch_id: str
    original_faculty_id: str
    substitute_faculty_id: str
    start_date: date
    end_date: date
    notes: str | None

    model_config = {"from_attributes": True}


class BatchRef(BaseModel):
    id: str
    name: str


class SubstitutionListItem(BaseModel):
    id: str
    start_date: date
    end_date: date
    notes: str | None
    batch: BatchRef | None
    original_faculty: FacultyRef | None
    substitute_faculty: FacultyRef | None


class PermanentAssignment(RequestModel):
    batch_id: str = Field(min_length=1)
    faculty_id: str = Field(min_length=1)


class BatchMerge(RequestModel):
    source_batch_id: str = Field(min_length=1)
    target_batch_id: str = Field(min_length=1)
