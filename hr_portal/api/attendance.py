import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from hr_portal.container import AppContainer
from hr_portal.core.rbac import require_roles
from hr_portal.core.security import get_container
from hr_portal.schemas.attendance import AttendanceOut, MarkAttendanceRequest

router = APIRouter(prefix="/attendance", tags=["attendance"], dependencies=[Depends(require_roles("hr"))])


@router.get("", response_model=list[AttendanceOut])
async def list_attendance(
    day: date | None = Query(default=None, description="One day; defaults to today"),
    start: date | None = None,
    end: date | None = None,
    container: AppContainer = Depends(get_container),
):
    """Records for one day, or for a date range when both start and end are given"""
    service = container.attendance
    if start is not None and end is not None:
        rows = await service.for_range(start, end)
    else:
        rows = await service.for_day(day or date.today())
    return [AttendanceOut.from_row(r) for r in rows]


@router.post("", response_model=AttendanceOut, status_code=status.HTTP_201_CREATED)
async def mark_attendance(payload: MarkAttendanceRequest, container: AppContainer = Depends(get_container)):
    row = await container.attendance.mark(payload.employee_id, payload.date, payload.status, payload.hours_worked)
    return AttendanceOut.from_row(row)


@router.get("/employees/{employee_id}", response_model=list[AttendanceOut])
async def employee_attendance(
    employee_id: uuid.UUID,
    start: date | None = None,
    end: date | None = None,
    container: AppContainer = Depends(get_container),
):
    return [AttendanceOut.from_row(r) for r in await container.attendance.for_employee(employee_id, start, end)]
