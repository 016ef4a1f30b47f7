"""
Leave requests and balances.

A request is filed PENDING and decided exactly once: HR approves or rejects
it. Approval charges the request's days against the employee's balance of
that leave type for the year of the decision. The request and the balance
are two separate writes; when charging fails the request stays approved and
the error propagates.
"""
import uuid
from datetime import date, datetime, timezone
from typing import Callable

from hr_portal.core.errors import ConflictError, InvalidRequest
from hr_portal.core.logger import get_logger
from hr_portal.models.enums import LeaveStatus
from hr_portal.store.base import RecordStore, Row, require_one

logger = get_logger(__name__)

LEAVE_STATUSES = frozenset(s.value for s in LeaveStatus)


def leave_days(start: date, end: date) -> int:
    """Calendar days from start to end, both included."""
    return (end - start).days + 1


class LeaveService:
    def __init__(self, records: RecordStore, clock: Callable[[], datetime] | None = None):
        self._records = records
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def create_request(
        self,
        employee_id: uuid.UUID,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str | None = None,
    ) -> Row:
        leave_type = leave_type.strip().upper()
        if not leave_type:
            raise InvalidRequest("Choose a leave type.")
        if end_date < start_date:
            raise InvalidRequest("End date must be on or after the start date.")
        await require_one(self._records, "employees", {"employee_id": employee_id}, "employee")

        row = await self._records.insert(
            "leave_requests",
            {
                "employee_id": employee_id,
                "leave_type": leave_type,
                "start_date": start_date,
                "end_date": end_date,
                "total_days": leave_days(start_date, end_date),
                "reason": reason,
                "applied_date": self._clock().date(),
                "status": LeaveStatus.PENDING.value,
            },
        )
        logger.info(
            "Leave request filed",
            extra={"employee_id": str(employee_id), "request_id": str(row["request_id"]), "days": row["total_days"]},
        )
        return row

    async def list_requests(self, status: str | None = None) -> list[Row]:
        if status is not None and status not in LEAVE_STATUSES:
            raise InvalidRequest(f"Unknown leave status: {status}.")
        filters = {"status": status} if status is not None else None
        return await self._records.find_many(
            "leave_requests", filters, expand=("employee", "reviewer"), order_by=("-applied_date", "-start_date")
        )

    async def employee_requests(self, employee_id: uuid.UUID) -> list[Row]:
        return await self._records.find_many(
            "leave_requests", {"employee_id": employee_id}, expand=("reviewer",), order_by=("-applied_date", "-start_date")
        )

    async def _decide(self, request_id: uuid.UUID, status: LeaveStatus, reviewer_id: uuid.UUID | None, comments: str | None) -> Row:
        request = await require_one(self._records, "leave_requests", {"request_id": request_id}, "leave_request")
        if request["status"] != LeaveStatus.PENDING.value:
            raise ConflictError("leave_request", request_id, request["status"])

        updated = await self._records.update(
            "leave_requests",
            # only a still-pending request is decided; a concurrent decision wins
            {"request_id": request_id, "status": LeaveStatus.PENDING.value},
            {
                "status": status.value,
                "reviewed_by": reviewer_id,
                "reviewed_date": self._clock(),
                "reviewer_comments": comments,
            },
        )
        if not updated:
            current = await require_one(self._records, "leave_requests", {"request_id": request_id}, "leave_request")
            raise ConflictError("leave_request", request_id, current["status"])
        logger.info("Leave request decided", extra={"request_id": str(request_id), "status": status.value})
        return updated[0]

    async def approve(self, request_id: uuid.UUID, reviewer_id: uuid.UUID | None, comments: str | None = None) -> Row:
        request = await self._decide(request_id, LeaveStatus.APPROVED, reviewer_id, comments)
        await self._charge_balance(request)
        return request

    async def reject(self, request_id: uuid.UUID, reviewer_id: uuid.UUID | None, comments: str | None = None) -> Row:
        return await self._decide(request_id, LeaveStatus.REJECTED, reviewer_id, comments)

    async def _charge_balance(self, request: Row) -> None:
        days = request.get("total_days")
        if days is None:
            days = leave_days(request["start_date"], request["end_date"])
        year = self._clock().year
        balance = await self._records.find_one(
            "leave_balances",
            {"employee_id": request["employee_id"], "leave_type": request["leave_type"], "year": year},
        )
        if balance is None:
            logger.info(
                "No leave balance to charge",
                extra={"employee_id": str(request["employee_id"]), "leave_type": request["leave_type"], "year": year},
            )
            return
        remaining = (balance.get("available_days") or 0) - days
        await self._records.update("leave_balances", {"balance_id": balance["balance_id"]}, {"available_days": remaining})

    async def employee_balance(self, employee_id: uuid.UUID, year: int | None = None) -> list[Row]:
        """Balances for one year (the current one by default)."""
        year = year or self._clock().year
        return await self._records.find_many(
            "leave_balances", {"employee_id": employee_id, "year": year}, order_by="leave_type"
        )
