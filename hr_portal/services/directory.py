"""
Employee directory: listing, search and HR edits of employee records, plus
the department and position catalogues they point at.
"""
import uuid
from typing import Any, Mapping

from hr_portal.core.errors import InvalidRequest, NotFoundError
from hr_portal.core.logger import get_logger
from hr_portal.models.enums import EmploymentStatus
from hr_portal.store.base import RecordStore, Row, require_one

logger = get_logger(__name__)

LIST_EXPAND = ("department", "position")
DETAIL_EXPAND = ("department", "position", "user")
DIRECTORY_ORDER = ("last_name", "first_name")

EDITABLE_FIELDS = frozenset({"first_name", "last_name", "department_id", "position_id", "employment_status"})
EMPLOYMENT_STATUSES = frozenset(s.value for s in EmploymentStatus)


def search_filters(query: str) -> dict[str, str]:
    """Case-insensitive match on first name, last name or employee code."""
    return {
        "first_name__icontains": query,
        "last_name__icontains": query,
        "employee_code__icontains": query,
    }


class EmployeeDirectory:
    def __init__(self, records: RecordStore):
        self._records = records

    async def list_employees(self, limit: int | None = None, offset: int = 0) -> list[Row]:
        return await self._records.find_many(
            "employees", expand=LIST_EXPAND, order_by=DIRECTORY_ORDER, limit=limit, offset=offset
        )

    async def search(self, query: str, limit: int | None = None, offset: int = 0) -> list[Row]:
        """A blank query lists everyone."""
        term = query.strip()
        if not term:
            return await self.list_employees(limit, offset)
        return await self._records.find_many(
            "employees",
            expand=LIST_EXPAND,
            order_by=DIRECTORY_ORDER,
            limit=limit,
            offset=offset,
            any_of=search_filters(term),
        )

    async def count(self, query: str | None = None) -> int:
        term = (query or "").strip()
        return await self._records.count("employees", any_of=search_filters(term) if term else None)

    async def by_department(self, department_id: uuid.UUID) -> list[Row]:
        await require_one(self._records, "departments", {"department_id": department_id}, "department")
        return await self._records.find_many(
            "employees", {"department_id": department_id}, expand=LIST_EXPAND, order_by=DIRECTORY_ORDER
        )

    async def get_employee(self, employee_id: uuid.UUID) -> Row:
        return await require_one(self._records, "employees", {"employee_id": employee_id}, "employee", DETAIL_EXPAND)

    async def update_employee(self, employee_id: uuid.UUID, changes: Mapping[str, Any]) -> Row:
        """
        Apply an HR edit. Only the directory fields can change; the user link
        and employee code are owned by account provisioning.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise InvalidRequest(f"These fields cannot be changed: {', '.join(sorted(unknown))}.")
        status = changes.get("employment_status")
        if "employment_status" in changes and status not in EMPLOYMENT_STATUSES:
            raise InvalidRequest(f"Unknown employment status: {status}.")
        for column in ("first_name", "last_name"):
            if column in changes and not (changes[column] or "").strip():
                raise InvalidRequest("Names cannot be blank.")

        await self.get_employee(employee_id)
        if changes.get("department_id") is not None:
            await require_one(self._records, "departments", {"department_id": changes["department_id"]}, "department")
        if changes.get("position_id") is not None:
            await require_one(self._records, "positions", {"position_id": changes["position_id"]}, "position")

        if changes:
            updated = await self._records.update("employees", {"employee_id": employee_id}, dict(changes))
            if not updated:
                raise NotFoundError("employee", employee_id)
            logger.info("Employee updated", extra={"employee_id": str(employee_id), "fields": sorted(changes)})
        return await self.get_employee(employee_id)

    async def departments(self) -> list[Row]:
        return await self._records.find_many("departments", order_by="department_name")

    async def positions(self, department_id: uuid.UUID | None = None) -> list[Row]:
        filters = {"department_id": department_id} if department_id is not None else None
        return await self._records.find_many("positions", filters, order_by="position_title")
