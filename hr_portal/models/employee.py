import uuid
from datetime import date
from sqlalchemy import String, Date, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_portal.db.base import Base
from hr_portal.models.enums import EmploymentStatus


class Employee(Base):
    __tablename__ = "employees"

    employee_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Optional link to a portal user (not all employees sign in); one employee per user
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="SET NULL"), unique=True, nullable=True
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    employee_code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    join_date: Mapped[date] = mapped_column(Date, nullable=False)
    employment_status: Mapped[str] = mapped_column(
        String(20), default=EmploymentStatus.ACTIVE.value, nullable=False
    )

    department_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("departments.department_id", ondelete="SET NULL"), nullable=True
    )
    position_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("positions.position_id", ondelete="SET NULL"), nullable=True
    )

    user = relationship("User")
    department = relationship("Department", back_populates="employees")
    position = relationship("Position")
