from datetime import date

from pydantic import BaseModel

from hr_portal.services.auth import EmployeeProfile


class DepartmentOut(BaseModel):
    id: str
    name: str


class PositionOut(BaseModel):
    id: str
    title: str


class EmployeeProfileOut(BaseModel):
    employee_id: str
    user_id: str | None
    employee_code: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    join_date: date
    employment_status: str
    department: DepartmentOut | None = None
    position: PositionOut | None = None

    @classmethod
    def from_profile(cls, profile: EmployeeProfile) -> "EmployeeProfileOut":
        department = profile.department
        position = profile.position
        return cls(
            employee_id=str(profile.employee_id),
            user_id=str(profile.user_id) if profile.user_id else None,
            employee_code=profile.employee_code,
            first_name=profile.first_name,
            last_name=profile.last_name,
            full_name=profile.full_name,
            email=profile.email,
            join_date=profile.join_date,
            employment_status=profile.employment_status,
            department=DepartmentOut(id=str(department["department_id"]), name=department["department_name"])
            if department
            else None,
            position=PositionOut(id=str(position["position_id"]), title=position["position_title"])
            if position
            else None,
        )
