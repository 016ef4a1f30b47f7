"""
Attendance records: HR marking for any employee and day, self-service
check-in/check-out, and the listings behind both views.

There is at most one record per employee and day; marking an existing day
overwrites it.
"""
import uuid
from datetime import date, datetime, timezone
from typing import Callable

from hr_portal.core.errors import ConflictError, InvalidRequest, StoreRejected
from hr_portal.core.logger import get_logger
from hr_portal.models.enums import AttendanceStatus
from hr_portal.store.base import RecordStore, Row, require_one

logger = get_logger(__name__)

ATTENDANCE_STATUSES = frozenset(s.value for s in AttendanceStatus)
ATTENDED = (AttendanceStatus.PRESENT.value, AttendanceStatus.LATE.value)
WITH_EMPLOYEE = ("employee", "employee.department")


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class AttendanceService:
    def __init__(self, records: RecordStore, clock: Callable[[], datetime] | None = None):
        self._records = records
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def _existing(self, employee_id: uuid.UUID, day: date) -> Row | None:
        return await self._records.find_one("attendance", {"employee_id": employee_id, "date": day})

    async def _upsert(self, employee_id: uuid.UUID, day: date, values: Row, existing: Row | None) -> Row:
        key = {"employee_id": employee_id, "date": day}
        if existing is not None:
            return (await self._records.update("attendance", key, values))[0]
        try:
            return await self._records.insert("attendance", {**key, **values})
        except StoreRejected:
            # marked by a concurrent request in between
            updated = await self._records.update("attendance", key, values)
            if not updated:
                raise
            return updated[0]

    async def mark(
        self,
        employee_id: uuid.UUID,
        day: date,
        status: str,
        hours_worked: float | None = None,
    ) -> Row:
        if status not in ATTENDANCE_STATUSES:
            raise InvalidRequest(f"Unknown attendance status: {status}.")
        if hours_worked is not None and not 0 <= hours_worked <= 24:
            raise InvalidRequest("Hours worked must be between 0 and 24.")
        await require_one(self._records, "employees", {"employee_id": employee_id}, "employee")

        existing = await self._existing(employee_id, day)
        values: Row = {"status": status}
        if hours_worked is not None:
            values["hours_worked"] = hours_worked
        if status in ATTENDED:
            # an employee's own check-in time wins over the time HR marked it
            values["check_in_time"] = (existing or {}).get("check_in_time") or self._clock()
        else:
            values.update(check_in_time=None, check_out_time=None)
        row = await self._upsert(employee_id, day, values, existing)
        logger.info("Attendance marked", extra={"employee_id": str(employee_id), "date": day.isoformat(), "status": status})
        return row

    async def check_in(self, employee_id: uuid.UUID) -> Row:
        now = self._clock()
        today = now.date()
        existing = await self._existing(employee_id, today)
        if existing is not None and existing.get("check_in_time") is not None:
            raise ConflictError("attendance", today.isoformat(), "checked in", user_message="You have already checked in today.")
        return await self._upsert(
            employee_id,
            today,
            {"status": AttendanceStatus.PRESENT.value, "check_in_time": now, "check_out_time": None},
            existing,
        )

    async def check_out(self, employee_id: uuid.UUID) -> Row:
        now = self._clock()
        today = now.date()
        existing = await self._existing(employee_id, today)
        if existing is None or existing.get("check_in_time") is None:
            raise InvalidRequest("You have not checked in today.")
        if existing.get("check_out_time") is not None:
            raise ConflictError("attendance", today.isoformat(), "checked out", user_message="You have already checked out today.")

        worked = (now - _utc(existing["check_in_time"])).total_seconds() / 3600
        values = {
            "check_out_time": now,
            "hours_worked": round(max(worked, 0.0), 1),
            "status": AttendanceStatus.PRESENT.value,
        }
        return (await self._records.update("attendance", {"attendance_id": existing["attendance_id"]}, values))[0]

    async def for_day(self, day: date) -> list[Row]:
        return await self._records.find_many("attendance", {"date": day}, expand=WITH_EMPLOYEE, order_by="check_in_time")

    async def for_employee(self, employee_id: uuid.UUID, start: date | None = None, end: date | None = None) -> list[Row]:
        filters: Row = {"employee_id": employee_id}
        if start is not None:
            filters["date__gte"] = start
        if end is not None:
            filters["date__lte"] = end
        return await self._records.find_many("attendance", filters, order_by="-date")

    async def for_range(self, start: date, end: date) -> list[Row]:
        if end < start:
            raise InvalidRequest("End date must be on or after the start date.")
        return await self._records.find_many(
            "attendance", {"date__gte": start, "date__lte": end}, expand=WITH_EMPLOYEE, order_by="-date"
        )
