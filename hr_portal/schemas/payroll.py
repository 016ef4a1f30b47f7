from datetime import date

from pydantic import BaseModel, Field

from hr_portal.schemas.directory import EmployeeRef
from hr_portal.store.base import Row


class PayrollOut(BaseModel):
    payroll_id: str
    employee_id: str
    pay_period_start: date
    pay_period_end: date
    gross_salary: float | None = None
    net_salary: float | None = None
    status: str
    payment_method: str | None = None
    transaction_reference: str | None = None
    payment_date: date | None = None
    employee: EmployeeRef | None = None

    @classmethod
    def from_row(cls, row: Row) -> "PayrollOut":
        return cls(
            payroll_id=str(row["payroll_id"]),
            employee_id=str(row["employee_id"]),
            pay_period_start=row["pay_period_start"],
            pay_period_end=row["pay_period_end"],
            gross_salary=row.get("gross_salary"),
            net_salary=row.get("net_salary"),
            status=row["status"],
            payment_method=row.get("payment_method"),
            transaction_reference=row.get("transaction_reference"),
            payment_date=row.get("payment_date"),
            employee=EmployeeRef.from_row(row.get("employee")),
        )


class ProcessPayrollRequest(BaseModel):
    payment_method: str = Field(min_length=1, max_length=30)  # e.g. BANK_TRANSFER, CHEQUE
    transaction_reference: str | None = Field(default=None, max_length=100)
