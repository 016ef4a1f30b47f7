from datetime import date, datetime

from pydantic import BaseModel, Field

from hr_portal.schemas.directory import EmployeeRef
from hr_portal.store.base import Row


class LeaveRequestOut(BaseModel):
    request_id: str
    employee_id: str
    leave_type: str
    start_date: date
    end_date: date
    total_days: float | None = None
    reason: str | None = None
    applied_date: date | None = None
    status: str
    reviewed_date: datetime | None = None
    reviewer_comments: str | None = None
    employee: EmployeeRef | None = None
    reviewer: EmployeeRef | None = None

    @classmethod
    def from_row(cls, row: Row) -> "LeaveRequestOut":
        return cls(
            request_id=str(row["request_id"]),
            employee_id=str(row["employee_id"]),
            leave_type=row["leave_type"],
            start_date=row["start_date"],
            end_date=row["end_date"],
            total_days=row.get("total_days"),
            reason=row.get("reason"),
            applied_date=row.get("applied_date"),
            status=row["status"],
            reviewed_date=row.get("reviewed_date"),
            reviewer_comments=row.get("reviewer_comments"),
            employee=EmployeeRef.from_row(row.get("employee")),
            reviewer=EmployeeRef.from_row(row.get("reviewer")),
        )


class LeaveRequestCreate(BaseModel):
    leave_type: str = Field(min_length=1, max_length=50)
    start_date: date
    end_date: date
    reason: str = Field(min_length=1, max_length=500)


class LeaveDecision(BaseModel):
    comments: str | None = Field(default=None, max_length=500)


class LeaveBalanceOut(BaseModel):
    leave_type: str
    year: int
    available_days: float | None = None
