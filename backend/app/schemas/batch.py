from datetime import date

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.common import FacultyRef, RequestModel, normalize_days, normalize_time
from app.schemas.skill import SkillOut
from app.services.intervals import time_to_minutes


class BatchWrite(RequestModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    start_date: date
    end_date: date
    start_time: str
    end_time: str
    days_of_week: list[str] = Field(min_length=1, max_length=7)
    faculty_id: str | None = None
    skill_id: str | None = None
    max_students: int | None = Field(default=None, ge=1, le=10000)
    student_ids: list[str] | None = Field(default=None, max_length=10000)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        return normalize_time(value)

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, value: list[str]) -> list[str]:
        return normalize_days(value)

    @field_validator("faculty_id", "skill_id")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        return value or None

    @model_validator(mode="after")
    def validate_ranges(self) -> "BatchWrite":
        if time_to_minutes(self.end_time) <= time_to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class BatchCreate(BatchWrite):
    pass


class BatchUpdate(BatchWrite):
    pass


class BatchOut(BaseModel):
    id: str
    name: str
    description: str | None
    start_date: date
    end_date: date
    start_time: str
    end_time: str
    days_of_week: list[str]
    max_students: int | None
    status: str
    faculty_id: str | None
    faculty: FacultyRef | None = None
    skill_id: str | None
    skill: SkillOut | None = None
    student_count: int = 0
    is_substituted: bool = False
    original_faculty: FacultyRef | None = None
    substitution_id: str | None = None


class BatchStudentOut(BaseModel):
    id: str
    name: str
    admission_number: str
    phone_number: str | None

    model_config = {"from_attributes": True}


class ActiveStudentsCount(BaseModel):
    count: int
