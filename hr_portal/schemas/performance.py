import uuid
from datetime import date

from pydantic import BaseModel, Field

from hr_portal.schemas.directory import EmployeeRef
from hr_portal.store.base import Row


class ReviewOut(BaseModel):
    review_id: str
    employee_id: str
    review_date: date
    overall_rating: float | None = None
    comments: str | None = None
    status: str
    reviewer: EmployeeRef | None = None

    @classmethod
    def from_row(cls, row: Row) -> "ReviewOut":
        return cls(
            review_id=str(row["review_id"]),
            employee_id=str(row["employee_id"]),
            review_date=row["review_date"],
            overall_rating=row.get("overall_rating"),
            comments=row.get("comments"),
            status=row["status"],
            reviewer=EmployeeRef.from_row(row.get("reviewer")),
        )


class ReviewCreate(BaseModel):
    employee_id: uuid.UUID
    review_date: date
    overall_rating: float | None = Field(default=None, ge=1, le=5)
    comments: str | None = Field(default=None, max_length=1000)


class GoalOut(BaseModel):
    goal_id: str
    employee_id: str
    title: str
    description: str | None = None
    target_date: date | None = None
    completion_date: date | None = None
    status: str

    @classmethod
    def from_row(cls, row: Row) -> "GoalOut":
        return cls(
            goal_id=str(row["goal_id"]),
            employee_id=str(row["employee_id"]),
            title=row["title"],
            description=row.get("description"),
            target_date=row.get("target_date"),
            completion_date=row.get("completion_date"),
            status=row["status"],
        )


class GoalCreate(BaseModel):
    employee_id: uuid.UUID
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    target_date: date | None = None


class GoalUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    target_date: date | None = None
    status: str | None = None  # NOT_STARTED, IN_PROGRESS, COMPLETED or CANCELLED
