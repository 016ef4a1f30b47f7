import uuid
from datetime import date

from sqlalchemy.orm import Session

from hr_portal.models.attendance import Attendance
from hr_portal.models.employee import Employee
from hr_portal.models.enums import EmploymentStatus, UserRole
from hr_portal.models.organization import Department, Position
from hr_portal.models.performance import PerformanceGoal, PerformanceReview
from hr_portal.models.user import User


def create_user(db: Session, email: str, role: str = UserRole.EMPLOYEE.value, user_id: uuid.UUID | None = None) -> User:
    u = User(user_id=user_id or uuid.uuid4(), email=email, role=role, is_active=True)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


def create_department(db: Session, name: str) -> Department:
    d = Department(department_name=name)
    db.add(d)
    db.commit()
    db.refresh(d)
    return d


def create_position(db: Session, title: str, department: Department | None = None) -> Position:
    p = Position(position_title=title, department_id=(department.department_id if department else None))
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


def create_employee(
    db: Session,
    code: str,
    first_name: str = "Test",
    last_name: str = "Employee",
    user: User | None = None,
    department: Department | None = None,
    position: Position | None = None,
    status: str = EmploymentStatus.ACTIVE.value,
) -> Employee:
    e = Employee(
        employee_code=code,
        first_name=first_name,
        last_name=last_name,
        join_date=date(2023, 1, 9),
        employment_status=status,
        user_id=(user.user_id if user else None),
        department_id=(department.department_id if department else None),
        position_id=(position.position_id if position else None),
    )
    db.add(e)
    db.commit()
    db.refresh(e)
    return e


def record_attendance(db: Session, employee: Employee, day: date, status: str, hours: float | None = 8.0) -> Attendance:
    a = Attendance(employee_id=employee.employee_id, date=day, status=status, hours_worked=hours)
    db.add(a)
    db.commit()
    return a


def create_review(db: Session, employee: Employee, rating: float | None, review_date: date = date(2024, 1, 15)) -> PerformanceReview:
    r = PerformanceReview(employee_id=employee.employee_id, review_date=review_date, overall_rating=rating, status="COMPLETED")
    db.add(r)
    db.commit()
    return r


def create_goal(db: Session, employee: Employee, title: str, status: str) -> PerformanceGoal:
    g = PerformanceGoal(employee_id=employee.employee_id, title=title, status=status)
    db.add(g)
    db.commit()
    return g


def sign_up_and_in(client, email: str, password: str = "secret123", role: str | None = None,
                   first_name: str = "Ada", last_name: str = "Lovelace"):
    """Sign up through the API and sign the client's portal session in. Returns the sign-in response."""
    r = client.post(
        "/auth/sign-up",
        json={"email": email, "password": password, "first_name": first_name, "last_name": last_name, "role": role},
    )
    assert r.status_code == 201, r.text
    return client.post("/auth/sign-in", json={"email": email, "password": password})


class FixedClock:
    """Settable stand-in for datetime.now(timezone.utc)."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def seed_employee(records, code, first="Ada", last="Lovelace", **extra):
    return records.seed(
        "employees",
        first_name=first,
        last_name=last,
        employee_code=code,
        join_date=date(2023, 1, 9),
        employment_status=extra.pop("employment_status", "ACTIVE"),
        **extra,
    )
