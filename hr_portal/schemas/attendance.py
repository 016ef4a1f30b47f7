import uuid
import datetime as dt

from pydantic import BaseModel, Field

from hr_portal.schemas.directory import EmployeeRef
from hr_portal.store.base import Row


class AttendanceOut(BaseModel):
    attendance_id: str
    employee_id: str
    date: dt.date
    status: str
    hours_worked: float | None = None
    check_in_time: dt.datetime | None = None
    check_out_time: dt.datetime | None = None
    employee: EmployeeRef | None = None

    @classmethod
    def from_row(cls, row: Row) -> "AttendanceOut":
        return cls(
            attendance_id=str(row["attendance_id"]),
            employee_id=str(row["employee_id"]),
            date=row["date"],
            status=row["status"],
            hours_worked=row.get("hours_worked"),
            check_in_time=row.get("check_in_time"),
            check_out_time=row.get("check_out_time"),
            employee=EmployeeRef.from_row(row.get("employee")),
        )


class MarkAttendanceRequest(BaseModel):
    employee_id: uuid.UUID
    date: dt.date
    status: str  # PRESENT, ABSENT, LATE, HALF_DAY, ON_LEAVE or HOLIDAY
    hours_worked: float | None = Field(default=None, ge=0, le=24)
