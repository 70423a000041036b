from datetime import date

from pydantic import BaseModel, Field

from app.schemas.common import FacultyRef, RequestModel


class StudentCreate(RequestModel):
    name: str = Field(min_length=1, max_length=200)
    admission_number: str = Field(min_length=1, max_length=50)
    phone_number: str | None = Field(default=None, max_length=30)
    remarks: str | None = Field(default=None, max_length=2000)


class StudentUpdate(RequestModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    admission_number: str | None = Field(default=None, min_length=1, max_length=50)
    phone_number: str | None = Field(default=None, max_length=30)
    remarks: str | None = Field(default=None, max_length=2000)


class StudentOut(BaseModel):
    id: str
    name: str
    admission_number: str
    phone_number: str | None
    remarks: str | None

    model_config = {"from_attributes": True}


class StudentPage(BaseModel):
    students: list[StudentOut]
    count: int


class StudentBatchOut(BaseModel):
    id: str
    name: str
    start_date: date
    end_date: date
    start_time: str
    end_time: str
    days_of_week: list[str]
    faculty: FacultyRef | None = None


class StudentBatches(BaseModel):
    batches: list[StudentBatchOut]
