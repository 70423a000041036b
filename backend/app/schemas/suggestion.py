from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.common import RequestModel, normalize_days, normalize_time


class SuggestFacultyRequest(RequestModel):
    skill_id: str = Field(min_length=1)
    start_date: date
    end_date: date
    days_of_week: list[str] = Field(min_length=1, max_length=7)
    start_time: str | None = None
    end_time: str | None = None

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, value: list[str]) -> list[str]:
        return normalize_days(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str | None) -> str | None:
        if not value:
            return None
        return normalize_time(value)

    @model_validator(mode="after")
    def validate_dates(self) -> "SuggestFacultyRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class CommonSlot(BaseModel):
    start: str
    end: str


class FacultySuggestion(BaseModel):
    id: str
    name: str
    common_slots: list[CommonSlot]
    status: Literal["available", "available_other_times"]


class SuggestFacultyResponse(BaseModel):
    suggestions: list[FacultySuggestion]
