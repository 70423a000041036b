from datetime import date

from pydantic import BaseModel, Field

from app.schemas.common import FacultyRef, RequestModel
from app.schemas.student import StudentOut


class AttendanceMark(RequestModel):
    student_id: str = Field(min_length=1)
    is_present: bool


class AttendanceUpsert(RequestModel):
    batch_id: str = Field(min_length=1)
    date: date
    attendance: list[AttendanceMark] = Field(min_length=1, max_length=10000)


class AttendanceOut(BaseModel):
    id: str
    batch_id: str
    student_id: str
    date: date
    is_present: bool

    model_config = {"from_attributes": True}


class DailyAttendanceOut(AttendanceOut):
    student: StudentOut | None = None


class AttendanceEntry(BaseModel):
    student_id: str
    is_present: bool


class BatchAttendanceReport(BaseModel):
    students: list[StudentOut]
    attendance_by_date: dict[str, list[AttendanceEntry]]


class FacultyBatchSummary(BaseModel):
    batch_id: str
    batch_name: str
    sessions: int
    present: int
    absent: int


class FacultyAttendanceReport(BaseModel):
    faculty: FacultyRef
    sessions: int
    present: int
    absent: int
    batches: list[FacultyBatchSummary]


class OverallAttendanceReport(BaseModel):
    faculty: list[FacultyAttendanceReport]
    sessions: int
    present: int
    absent: int
