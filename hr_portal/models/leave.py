import uuid
from datetime import date, datetime
from sqlalchemy import Integer, String, Date, DateTime, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_portal.db.base import Base
from hr_portal.models.enums import LeaveStatus


class LeaveBalance(Base):
    __tablename__ = "leave_balances"

    balance_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.employee_id", ondelete="CASCADE"), index=True, nullable=False
    )
    leave_type: Mapped[str] = mapped_column(String(50), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    available_days: Mapped[float | None] = mapped_column(Numeric(5, 1, asdecimal=False), nullable=True)


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    request_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.employee_id", ondelete="CASCADE"), index=True, nullable=False
    )
    leave_type: Mapped[str] = mapped_column(String(50), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_days: Mapped[float | None] = mapped_column(Numeric(5, 1, asdecimal=False), nullable=True)
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    applied_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=LeaveStatus.PENDING.value, nullable=False)

    # set once HR approves or rejects
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("employees.employee_id", ondelete="SET NULL"), nullable=True
    )
    reviewed_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewer_comments: Mapped[str | None] = mapped_column(String(500), nullable=True)

    employee = relationship("Employee", foreign_keys=[employee_id])
    reviewer = relationship("Employee", foreign_keys=[reviewed_by])
