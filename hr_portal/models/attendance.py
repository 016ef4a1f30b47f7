import uuid
import datetime
from sqlalchemy import String, Date, DateTime, ForeignKey, Numeric, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_portal.db.base import Base


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )

    attendance_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.employee_id", ondelete="CASCADE"), index=True, nullable=False
    )
    date: Mapped[datetime.date] = mapped_column(Date, index=True, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)  # PRESENT, ABSENT, LATE, ...
    hours_worked: Mapped[float | None] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=True)
    check_in_time: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    check_out_time: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    employee = relationship("Employee")
