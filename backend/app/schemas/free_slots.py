from datetime import date

from pydantic import BaseModel

from app.schemas.common import FacultyRef


class DaySlotsOut(BaseModel):
    date: date
    time: list[str]


class FacultyFreeSlotsOut(BaseModel):
    faculty: FacultyRef
    slots: list[DaySlotsOut]
