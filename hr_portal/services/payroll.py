"""
Payroll runs move DRAFT -> PROCESSED -> PAID. Processing records how and when
the payment went out; each step only applies from the step before it.
"""
import uuid
from datetime import datetime, timezone
from typing import Callable

from hr_portal.core.errors import ConflictError, InvalidRequest
from hr_portal.core.logger import get_logger
from hr_portal.models.enums import PayrollStatus
from hr_portal.store.base import RecordStore, Row, require_one

logger = get_logger(__name__)

WITH_EMPLOYEE = ("employee", "employee.department", "employee.position")


class PayrollService:
    def __init__(self, records: RecordStore, clock: Callable[[], datetime] | None = None):
        self._records = records
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def list_payroll(self) -> list[Row]:
        return await self._records.find_many("payroll", expand=WITH_EMPLOYEE, order_by="-pay_period_start")

    async def employee_payroll(self, employee_id: uuid.UUID) -> list[Row]:
        return await self._records.find_many("payroll", {"employee_id": employee_id}, order_by="-pay_period_start")

    async def _advance(self, payroll_id: uuid.UUID, expected: PayrollStatus, patch: Row) -> Row:
        current = await require_one(self._records, "payroll", {"payroll_id": payroll_id}, "payroll")
        if current["status"] != expected.value:
            raise ConflictError("payroll", payroll_id, current["status"])
        updated = await self._records.update("payroll", {"payroll_id": payroll_id, "status": expected.value}, patch)
        if not updated:
            current = await require_one(self._records, "payroll", {"payroll_id": payroll_id}, "payroll")
            raise ConflictError("payroll", payroll_id, current["status"])
        logger.info("Payroll advanced", extra={"payroll_id": str(payroll_id), "status": patch["status"]})
        return updated[0]

    async def process(self, payroll_id: uuid.UUID, payment_method: str, transaction_reference: str | None = None) -> Row:
        if not payment_method.strip():
            raise InvalidRequest("Choose a payment method.")
        return await self._advance(
            payroll_id,
            PayrollStatus.DRAFT,
            {
                "status": PayrollStatus.PROCESSED.value,
                "payment_method": payment_method.strip(),
                "transaction_reference": transaction_reference,
                "payment_date": self._clock().date(),
            },
        )

    async def mark_paid(self, payroll_id: uuid.UUID) -> Row:
        return await self._advance(payroll_id, PayrollStatus.PROCESSED, {"status": PayrollStatus.PAID.value})
