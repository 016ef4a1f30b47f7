import uuid
from datetime import date
from sqlalchemy import String, Date, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_portal.db.base import Base
from hr_portal.models.enums import PayrollStatus


class Payroll(Base):
    __tablename__ = "payroll"

    payroll_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.employee_id", ondelete="CASCADE"), index=True, nullable=False
    )
    pay_period_start: Mapped[date] = mapped_column(Date, nullable=False)
    pay_period_end: Mapped[date] = mapped_column(Date, nullable=False)
    gross_salary: Mapped[float | None] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    net_salary: Mapped[float | None] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=PayrollStatus.DRAFT.value, nullable=False)

    # filled in when the payroll is processed
    payment_method: Mapped[str | None] = mapped_column(String(30), nullable=True)
    transaction_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    employee = relationship("Employee")
