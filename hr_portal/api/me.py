from datetime import date

from fastapi import APIRouter, Depends, Query, status

from hr_portal.container import AppContainer
from hr_portal.core.errors import NotFoundError
from hr_portal.core.security import get_container, get_current_user, get_portal
from hr_portal.portal import PortalSession
from hr_portal.schemas.attendance import AttendanceOut
from hr_portal.schemas.auth import CurrentUserOut
from hr_portal.schemas.employee import EmployeeProfileOut
from hr_portal.schemas.leave import LeaveBalanceOut, LeaveRequestCreate, LeaveRequestOut
from hr_portal.schemas.payroll import PayrollOut
from hr_portal.schemas.performance import GoalOut, ReviewOut
from hr_portal.schemas.stats import AttendanceStats, EmployeeStats
from hr_portal.services.auth import CurrentUser, EmployeeProfile

router = APIRouter(prefix="/me", tags=["me"])


async def _my_employee(portal: PortalSession, user: CurrentUser) -> EmployeeProfile:
    profile = await portal.auth.get_current_employee()
    if profile is None:
        raise NotFoundError("employee", str(user.user_id))
    return profile


@router.get("", response_model=CurrentUserOut)
def me(current_user: CurrentUser = Depends(get_current_user)):
    """Profile of the signed-in user (role ADMIN or EMPLOYEE)"""
    return CurrentUserOut.from_user(current_user)


@router.get("/employee", response_model=EmployeeProfileOut)
async def my_employee(
    portal: PortalSession = Depends(get_portal),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Employee record with department, position and email"""
    profile = await _my_employee(portal, current_user)
    return EmployeeProfileOut.from_profile(profile)


@router.get("/stats", response_model=EmployeeStats)
async def my_stats(
    portal: PortalSession = Depends(get_portal),
    current_user: CurrentUser = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
):
    profile = await _my_employee(portal, current_user)
    return await container.dashboards.employee_stats(profile.employee_id, date.today())


@router.get("/attendance", response_model=AttendanceStats)
async def my_attendance(
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    portal: PortalSession = Depends(get_portal),
    current_user: CurrentUser = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
):
    """Attendance counts for one month (defaults to the current month)"""
    today = date.today()
    profile = await _my_employee(portal, current_user)
    return await container.dashboards.employee_attendance_stats(
        profile.employee_id, year or today.year, month or today.month
    )


@router.post("/attendance/check-in", response_model=AttendanceOut)
async def check_in(
    portal: PortalSession = Depends(get_portal),
    current_user: CurrentUser = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
):
    profile = await _my_employee(portal, current_user)
    return AttendanceOut.from_row(await container.attendance.check_in(profile.employee_id))


@router.post("/attendance/check-out", response_model=AttendanceOut)
async def check_out(
    portal: PortalSession = Depends(get_portal),
    current_user: CurrentUser = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
):
    """Closes today's record and fills in hours worked"""
    profile = await _my_employee(portal, current_user)
    return AttendanceOut.from_row(await container.attendance.check_out(profile.employee_id))


@router.get("/leave-requests", response_model=list[LeaveRequestOut])
async def my_leave_requests(
    portal: PortalSession = Depends(get_portal),
    current_user: CurrentUser = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
):
    profile = await _my_employee(portal, current_user)
    return [LeaveRequestOut.from_row(r) for r in await container.leave.employee_requests(profile.employee_id)]


@router.post("/leave-requests", response_model=LeaveRequestOut, status_code=status.HTTP_201_CREATED)
async def request_leave(
    payload: LeaveRequestCreate,
    portal: PortalSession = Depends(get_portal),
    current_user: CurrentUser = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
):
    profile = await _my_employee(portal, current_user)
    row = await container.leave.create_request(
        profile.employee_id, payload.leave_type, payload.start_date, payload.end_date, payload.reason
    )
    return LeaveRequestOut.from_row(row)


@router.get("/leave-balance", response_model=list[LeaveBalanceOut])
async def my_leave_balance(
    year: int | None = Query(default=None, ge=2000, le=2100),
    portal: PortalSession = Depends(get_portal),
    current_user: CurrentUser = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
):
    profile = await _my_employee(portal, current_user)
    return await container.leave.employee_balance(profile.employee_id, year)


@router.get("/payroll", response_model=list[PayrollOut])
async def my_payroll(
    portal: PortalSession = Depends(get_portal),
    current_user: CurrentUser = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
):
    profile = await _my_employee(portal, current_user)
    return [PayrollOut.from_row(r) for r in await container.payroll.employee_payroll(profile.employee_id)]


@router.get("/goals", response_model=list[GoalOut])
async def my_goals(
    portal: PortalSession = Depends(get_portal),
    current_user: CurrentUser = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
):
    profile = await _my_employee(portal, current_user)
    return [GoalOut.from_row(r) for r in await container.performance.employee_goals(profile.employee_id)]


@router.get("/reviews", response_model=list[ReviewOut])
async def my_reviews(
    portal: PortalSession = Depends(get_portal),
    current_user: CurrentUser = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
):
    profile = await _my_employee(portal, current_user)
    return [ReviewOut.from_row(r) for r in await container.performance.employee_reviews(profile.employee_id)]
