import re

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.services.intervals import normalize_day

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


class RequestModel(BaseModel):
    """Request body accepting camelCase keys and snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


class FacultyRef(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}


class MessageOut(BaseModel):
    message: str


def normalize_time(value: str) -> str:
    """Validate ``HH:MM`` or ``HH:MM:SS`` and return ``HH:MM``."""
    value = value.strip()
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return value[:5]


def normalize_days(values: list[str]) -> list[str]:
    days: list[str] = []
    for item in values:
        day = normalize_day(item)
        if day is None:
            raise ValueError(f"Invalid day value: {item}")
        if day not in days:
            days.append(day)
    if not days:
        raise ValueError("At least one day of the week is required")
    return days
