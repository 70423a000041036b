from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.models.faculty import EmploymentType
from app.schemas.common import RequestModel, normalize_time
from app.schemas.skill import SkillOut
from app.services.intervals import normalize_day, time_to_minutes


class AvailabilityWindowIn(RequestModel):
    day_of_week: str
    start_time: str
    end_time: str

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, value: str) -> str:
        day = normalize_day(value)
        if day is None:
            raise ValueError("Invalid day value")
        return day

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        return normalize_time(value)

    @model_validator(mode="after")
    def validate_order(self) -> "AvailabilityWindowIn":
        if time_to_minutes(self.end_time) <= time_to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class AvailabilityReplace(RequestModel):
    availability: list[AvailabilityWindowIn] = Field(default_factory=list, max_length=7)

    @model_validator(mode="after")
    def validate_unique_days(self) -> "AvailabilityReplace":
        days = [window.day_of_week for window in self.availability]
        if len(days) != len(set(days)):
            raise ValueError("Each day may appear only once in availability")
        return self


class AvailabilityWindowOut(BaseModel):
    id: str
    day_of_week: str
    start_time: str
    end_time: str

    model_config = {"from_attributes": True}


class FacultyCreate(RequestModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr | None = None
    phone_number: str | None = Field(default=None, max_length=30)
    employment_type: EmploymentType = EmploymentType.full_time
    is_active: bool = True
    skill_ids: list[str] = Field(default_factory=list, max_length=100)
    availability: list[AvailabilityWindowIn] | None = Field(default=None, max_length=7)

    @model_validator(mode="after")
    def validate_unique_days(self) -> "FacultyCreate":
        days = [window.day_of_week for window in self.availability or []]
        if len(days) != len(set(days)):
            raise ValueError("Each day may appear only once in availability")
        return self


class FacultyUpdate(RequestModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    phone_number: str | None = Field(default=None, max_length=30)
    employment_type: EmploymentType | None = None
    is_active: bool | None = None
    skill_ids: list[str] | None = Field(default=None, max_length=100)


class FacultyOut(BaseModel):
    id: str
    name: str
    email: str | None
    phone_number: str | None
    employment_type: EmploymentType
    is_active: bool
    skills: list[SkillOut] = Field(default_factory=list)
    availability: list[AvailabilityWindowOut] = Field(default_factory=list)
