"""
Lazy account provisioning.

The identity provider only knows email + password + sign-up metadata. The
first successful sign-in creates the portal's own `users` profile and the
matching `employees` record. Running it again is a no-op.
"""
import time
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Callable

from hr_portal.core.errors import ProvisioningFailure, TransientStoreError
from hr_portal.core.logger import get_logger
from hr_portal.models.enums import EmploymentStatus, UserRole
from hr_portal.store.base import RecordStore, Row

logger = get_logger(__name__)


def time_based_employee_code() -> str:
    """EMP-<last four digits of epoch milliseconds>. Collisions are possible under concurrent sign-ups."""
    return f"EMP-{str(int(time.time() * 1000))[-4:]}"


def normalize_role(requested: str | None) -> UserRole:
    if requested == UserRole.ADMIN.value:
        return UserRole.ADMIN
    return UserRole.EMPLOYEE


@dataclass(frozen=True)
class ProvisioningRequest:
    subject_id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    requested_role: str | None = None


class AccountProvisioner:
    def __init__(
        self,
        records: RecordStore,
        code_factory: Callable[[], str] = time_based_employee_code,
        today: Callable[[], date] = date.today,
    ):
        self._records = records
        self._code_factory = code_factory
        self._today = today

    async def _lookup(self, table: str, subject_id: uuid.UUID) -> Row | None:
        # a failed existence check must not block provisioning; the insert decides
        try:
            return await self._records.find_one(table, {"user_id": subject_id})
        except TransientStoreError as exc:
            logger.warning(
                "Existence check failed, assuming no %s record",
                table,
                extra={"table": table, "subject_id": str(subject_id), "reason": exc.reason},
            )
            return None

    async def _insert(self, table: str, row: Row) -> Row:
        try:
            return await self._records.insert(table, row)
        except TransientStoreError as exc:
            logger.error(
                "Provisioning insert failed",
                extra={"table": table, "subject_id": str(row.get("user_id")), "reason": exc.reason},
            )
            raise ProvisioningFailure(table, exc.reason) from exc

    async def ensure_account(self, request: ProvisioningRequest) -> None:
        """
        Make sure a users row and an employees row exist for the subject.

        Raises ProvisioningFailure naming the table when an insert is rejected.
        """
        subject = request.subject_id

        if await self._lookup("users", subject) is None:
            role = normalize_role(request.requested_role)
            await self._insert(
                "users",
                {
                    "user_id": subject,
                    "email": request.email,
                    "role": role.value,
                    "is_active": True,
                },
            )
            logger.info("User profile created", extra={"subject_id": str(subject), "role": role.value})

        if await self._lookup("employees", subject) is None:
            code = self._code_factory()
            await self._insert(
                "employees",
                {
                    "user_id": subject,
                    "first_name": request.first_name,
                    "last_name": request.last_name,
                    "employee_code": code,
                    "join_date": self._today(),
                    "employment_status": EmploymentStatus.ACTIVE.value,
                },
            )
            logger.info("Employee record created", extra={"subject_id": str(subject), "employee_code": code})
