import asyncio
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable

from hr_portal.core.config import BootstrapTimeouts
from hr_portal.core.errors import OperationTimeout, ProvisioningFailure, TransientStoreError
from hr_portal.core.logger import get_logger
from hr_portal.core.timeouts import with_timeout
from hr_portal.identity.base import AuthSession, Identity, SessionStore
from hr_portal.models.enums import UserRole
from hr_portal.services.provisioning import AccountProvisioner, ProvisioningRequest, normalize_role
from hr_portal.store.base import RecordStore, Row

logger = get_logger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    user_id: uuid.UUID
    email: str
    role: str
    is_active: bool = True
    last_login: datetime | None = None
    # built from the identity alone because the profile could not be read
    is_fallback: bool = False

    @property
    def portal_role(self) -> str:
        return "hr" if self.role == UserRole.ADMIN.value else "employee"

    @classmethod
    def from_row(cls, row: Row) -> "CurrentUser":
        return cls(
            user_id=row["user_id"],
            email=row["email"],
            role=row["role"],
            is_active=row["is_active"],
            last_login=row.get("last_login"),
        )

    @classmethod
    def fallback(cls, identity: Identity) -> "CurrentUser":
        return cls(
            user_id=identity.subject_id,
            email=identity.email,
            role=UserRole.EMPLOYEE.value,
            is_fallback=True,
        )


@dataclass(frozen=True)
class EmployeeProfile:
    employee_id: uuid.UUID
    user_id: uuid.UUID | None
    first_name: str
    last_name: str
    employee_code: str
    join_date: date
    employment_status: str
    email: str
    department: Row | None = None
    position: Row | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class AuthService:
    """
    Sign-up, sign-in (with provisioning), sign-out and current-user lookups
    for one portal session.
    """

    def __init__(
        self,
        sessions: SessionStore,
        records: RecordStore,
        provisioner: AccountProvisioner | None = None,
        timeouts: BootstrapTimeouts | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._sessions = sessions
        self._records = records
        self._provisioner = provisioner or AccountProvisioner(records)
        self._timeouts = timeouts or BootstrapTimeouts()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        # cleared while a sign-in is provisioning so profile reads wait for it
        self._sign_in_settled = asyncio.Event()
        self._sign_in_settled.set()

    async def sign_up(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: str | None = None,
    ) -> Identity:
        """Create the identity only; portal records are created on first sign-in."""
        metadata = {
            "first_name": first_name,
            "last_name": last_name,
            "role": normalize_role(role).value,
        }
        identity = await self._sessions.sign_up(email, password, metadata)
        logger.info("Sign-up completed", extra={"subject_id": str(identity.subject_id)})
        return identity

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Authenticate, then provision the account and stamp last_login.

        A provisioning failure signs the identity back out before the
        ProvisioningFailure propagates, so nobody stays signed in without
        portal records.
        """
        self._sign_in_settled.clear()
        try:
            session = await self._sessions.sign_in_with_password(email, password)
            identity = session.identity
            request = ProvisioningRequest(
                subject_id=identity.subject_id,
                email=identity.email or email,
                first_name=identity.first_name or "User",
                last_name=identity.last_name or "User",
                requested_role=identity.requested_role,
            )
            try:
                await self._provisioner.ensure_account(request)
            except ProvisioningFailure as exc:
                logger.error(
                    "Account setup failed, signing out",
                    extra={"subject_id": str(identity.subject_id), "table": exc.table, "error_id": exc.error_id},
                )
                await self._sign_out_quietly()
                raise
            await self._touch_last_login(identity.subject_id)
            logger.info("Sign-in completed", extra={"subject_id": str(identity.subject_id)})
            return session
        finally:
            self._sign_in_settled.set()

    async def _touch_last_login(self, subject_id: uuid.UUID) -> None:
        try:
            await self._records.update("users", {"user_id": subject_id}, {"last_login": self._clock()})
        except TransientStoreError as exc:
            logger.warning("Failed to update last login", extra={"subject_id": str(subject_id), "reason": exc.reason})

    async def _sign_out_quietly(self) -> None:
        try:
            await self._sessions.sign_out()
        except Exception:
            logger.exception("Sign-out after failed account setup also failed")

    async def sign_out(self) -> None:
        await self._sessions.sign_out()

    async def get_session(self) -> AuthSession | None:
        return await self._sessions.get_session()

    async def refresh_session(self) -> AuthSession:
        return await self._sessions.refresh_session()

    async def get_current_user(self) -> CurrentUser | None:
        """
        Profile of the signed-in identity, or None when nobody is signed in.

        If the users table cannot be read in time, or has no row yet, a
        minimal EMPLOYEE profile built from the identity is returned instead.
        """
        await self._sign_in_settled.wait()

        identity = await self._sessions.get_current_identity()
        if identity is None:
            return None

        try:
            row = await with_timeout(
                self._records.find_one("users", {"user_id": identity.subject_id}),
                self._timeouts.profile_query,
                "users table query",
            )
        except (OperationTimeout, TransientStoreError) as exc:
            logger.warning(
                "Profile query failed, using minimal profile",
                extra={"subject_id": str(identity.subject_id), "error": exc.message},
            )
            return CurrentUser.fallback(identity)

        if row is None:
            logger.warning("Identity has no users row, using minimal profile", extra={"subject_id": str(identity.subject_id)})
            return CurrentUser.fallback(identity)
        return CurrentUser.from_row(row)

    async def _optional_lookup(self, table: str, filters: dict[str, Any]) -> Row | None:
        if any(value is None for value in filters.values()):
            return None
        try:
            return await with_timeout(
                self._records.find_one(table, filters),
                self._timeouts.lookup,
                f"{table} lookup",
            )
        except (OperationTimeout, TransientStoreError) as exc:
            logger.warning("Optional lookup failed, continuing without it", extra={"table": table, "error": exc.message})
            return None

    async def get_current_employee(self) -> EmployeeProfile | None:
        """
        Employee record of the signed-in identity with department, position and email.

        The employee query itself is required: its timeout or failure propagates.
        The three follow-up lookups are optional and run concurrently.
        """
        identity = await self._sessions.get_current_identity()
        if identity is None:
            return None

        try:
            employee = await with_timeout(
                self._records.find_one("employees", {"user_id": identity.subject_id}),
                self._timeouts.employee_query,
                "employee query",
            )
        except OperationTimeout:
            logger.error("Employee query timed out", extra={"subject_id": str(identity.subject_id)})
            raise
        if employee is None:
            logger.info("No employee record for identity", extra={"subject_id": str(identity.subject_id)})
            return None

        department, position, user = await asyncio.gather(
            self._optional_lookup("departments", {"department_id": employee.get("department_id")}),
            self._optional_lookup("positions", {"position_id": employee.get("position_id")}),
            self._optional_lookup("users", {"user_id": identity.subject_id}),
        )

        return EmployeeProfile(
            employee_id=employee["employee_id"],
            user_id=employee["user_id"],
            first_name=employee["first_name"],
            last_name=employee["last_name"],
            employee_code=employee["employee_code"],
            join_date=employee["join_date"],
            employment_status=employee["employment_status"],
            email=(user or {}).get("email") or identity.email,
            department=department,
            position=position,
        )
