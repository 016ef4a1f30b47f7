import uuid
from datetime import date

from pydantic import BaseModel, Field

from hr_portal.schemas.employee import DepartmentOut, PositionOut
from hr_portal.store.base import Row


def _department(row: Row | None) -> DepartmentOut | None:
    if not row:
        return None
    return DepartmentOut(id=str(row["department_id"]), name=row["department_name"])


def _position(row: Row | None) -> PositionOut | None:
    if not row:
        return None
    return PositionOut(id=str(row["position_id"]), title=row["position_title"])


class EmployeeRef(BaseModel):
    """Who a record belongs to (or who reviewed it)"""
    employee_id: str
    employee_code: str
    full_name: str
    department: DepartmentOut | None = None

    @classmethod
    def from_row(cls, row: Row | None) -> "EmployeeRef | None":
        if not row:
            return None
        return cls(
            employee_id=str(row["employee_id"]),
            employee_code=row["employee_code"],
            full_name=f"{row['first_name']} {row['last_name']}",
            department=_department(row.get("department")),
        )


class EmployeeOut(BaseModel):
    employee_id: str
    user_id: str | None = None
    employee_code: str
    first_name: str
    last_name: str
    join_date: date
    employment_status: str
    email: str | None = None
    department: DepartmentOut | None = None
    position: PositionOut | None = None

    @classmethod
    def from_row(cls, row: Row) -> "EmployeeOut":
        user = row.get("user")
        return cls(
            employee_id=str(row["employee_id"]),
            user_id=str(row["user_id"]) if row.get("user_id") else None,
            employee_code=row["employee_code"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            join_date=row["join_date"],
            employment_status=row["employment_status"],
            email=user["email"] if user else None,
            department=_department(row.get("department")),
            position=_position(row.get("position")),
        )


class EmployeePage(BaseModel):
    total: int
    items: list[EmployeeOut]


class EmployeeUpdate(BaseModel):
    """HR edit; fields left out stay as they are"""
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    department_id: uuid.UUID | None = None
    position_id: uuid.UUID | None = None
    employment_status: str | None = None


class PositionRowOut(PositionOut):
    department_id: str | None = None

    @classmethod
    def from_row(cls, row: Row) -> "PositionRowOut":
        department_id = row.get("department_id")
        return cls(
            id=str(row["position_id"]),
            title=row["position_title"],
            department_id=str(department_id) if department_id else None,
        )
