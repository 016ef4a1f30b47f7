from dataclasses import dataclass

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from hr_portal.core.config import Settings
from hr_portal.core.logger import get_logger
from hr_portal.db.base import Base
from hr_portal.db.session import build_engine, build_session_factory
from hr_portal.identity.provider import IdentityProvider
from hr_portal.portal import PortalRegistry
from hr_portal.services.attendance import AttendanceService
from hr_portal.services.dashboards import DashboardService
from hr_portal.services.directory import EmployeeDirectory
from hr_portal.services.leave import LeaveService
from hr_portal.services.payroll import PayrollService
from hr_portal.services.performance import PerformanceService
from hr_portal.services.recruitment import RecruitmentService
from hr_portal.store.sql import SqlRecordStore

logger = get_logger(__name__)


@dataclass
class AppContainer:
    """Everything with a lifetime longer than a request. Built once per app."""
    settings: Settings
    engine: Engine
    session_factory: sessionmaker[Session]
    records: SqlRecordStore
    identity_provider: IdentityProvider
    dashboards: DashboardService
    directory: EmployeeDirectory
    attendance: AttendanceService
    leave: LeaveService
    payroll: PayrollService
    performance: PerformanceService
    recruitment: RecruitmentService
    portals: PortalRegistry

    async def close(self) -> None:
        await self.portals.close()
        self.engine.dispose()
        logger.info("Container closed")


def build_container(settings: Settings, create_tables: bool = False) -> AppContainer:
    engine = build_engine(settings.DATABASE_URL)
    if create_tables:
        Base.metadata.create_all(bind=engine)

    session_factory = build_session_factory(engine)
    records = SqlRecordStore(session_factory)
    provider = IdentityProvider(session_factory, access_token_ttl=settings.ACCESS_TOKEN_TTL_SECONDS)

    return AppContainer(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        records=records,
        identity_provider=provider,
        dashboards=DashboardService(records),
        directory=EmployeeDirectory(records),
        attendance=AttendanceService(records),
        leave=LeaveService(records),
        payroll=PayrollService(records),
        performance=PerformanceService(records),
        recruitment=RecruitmentService(records),
        portals=PortalRegistry(
            provider,
            records,
            settings.bootstrap_timeouts(),
            idle_ttl=settings.PORTAL_IDLE_TTL_SECONDS,
            max_sessions=settings.PORTAL_MAX_SESSIONS,
        ),
    )
