import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query

from hr_portal.core.rbac import require_roles
from hr_portal.core.security import get_container
from hr_portal.container import AppContainer
from hr_portal.schemas.stats import (
    AttendanceStats,
    DepartmentCount,
    HRStats,
    PayrollStats,
    RecruitmentStats,
    TopPerformer,
)

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(require_roles("hr"))],
)


@router.get("/stats", response_model=HRStats)
async def hr_stats(container: AppContainer = Depends(get_container)):
    """Headline numbers: headcount, present today, pending leaves, open positions"""
    return await container.dashboards.hr_stats(date.today())


@router.get("/departments", response_model=list[DepartmentCount])
async def departments(container: AppContainer = Depends(get_container)):
    return await container.dashboards.department_overview()


@router.get("/attendance", response_model=AttendanceStats)
async def attendance(
    day: date | None = Query(default=None, description="Defaults to today"),
    container: AppContainer = Depends(get_container),
):
    return await container.dashboards.attendance_summary(day or date.today())


@router.get("/payroll", response_model=PayrollStats)
async def payroll(
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    container: AppContainer = Depends(get_container),
):
    return await container.dashboards.payroll_stats(year, month)


@router.get("/recruitment", response_model=RecruitmentStats)
async def recruitment(container: AppContainer = Depends(get_container)):
    return await container.dashboards.recruitment_stats()


@router.get("/employees/status", response_model=dict[str, int])
async def employees_by_status(container: AppContainer = Depends(get_container)):
    return await container.dashboards.employee_count_by_status()


@router.get("/top-performers", response_model=list[TopPerformer])
async def top_performers(
    limit: int = Query(default=5, ge=1, le=50),
    container: AppContainer = Depends(get_container),
):
    return await container.dashboards.top_performers(limit)


@router.get("/employees/{employee_id}/rating")
async def employee_rating(employee_id: uuid.UUID, container: AppContainer = Depends(get_container)):
    rating = await container.dashboards.employee_average_rating(employee_id)
    return {"employee_id": str(employee_id), "average_rating": rating}


@router.get("/employees/{employee_id}/attendance", response_model=AttendanceStats)
async def employee_attendance(
    employee_id: uuid.UUID,
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    container: AppContainer = Depends(get_container),
):
    today = date.today()
    return await container.dashboards.employee_attendance_stats(
        employee_id, year or today.year, month or today.month
    )
