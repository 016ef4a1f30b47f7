import uuid

from fastapi import APIRouter, Depends, Query

from hr_portal.container import AppContainer
from hr_portal.core.rbac import require_roles
from hr_portal.core.security import get_container, get_portal
from hr_portal.portal import PortalSession
from hr_portal.schemas.leave import LeaveBalanceOut, LeaveDecision, LeaveRequestOut

router = APIRouter(prefix="/leave", tags=["leave"], dependencies=[Depends(require_roles("hr"))])


async def reviewer_id(portal: PortalSession = Depends(get_portal)) -> uuid.UUID | None:
    """Employee record of the HR user deciding; HR accounts without one review anonymously."""
    profile = await portal.auth.get_current_employee()
    return profile.employee_id if profile else None


@router.get("/requests", response_model=list[LeaveRequestOut])
async def list_requests(
    status: str | None = Query(default=None, description="PENDING, APPROVED, REJECTED or CANCELLED"),
    container: AppContainer = Depends(get_container),
):
    return [LeaveRequestOut.from_row(r) for r in await container.leave.list_requests(status)]


@router.post("/requests/{request_id}/approve", response_model=LeaveRequestOut)
async def approve(
    request_id: uuid.UUID,
    payload: LeaveDecision | None = None,
    reviewer: uuid.UUID | None = Depends(reviewer_id),
    container: AppContainer = Depends(get_container),
):
    row = await container.leave.approve(request_id, reviewer, payload.comments if payload else None)
    return LeaveRequestOut.from_row(row)


@router.post("/requests/{request_id}/reject", response_model=LeaveRequestOut)
async def reject(
    request_id: uuid.UUID,
    payload: LeaveDecision | None = None,
    reviewer: uuid.UUID | None = Depends(reviewer_id),
    container: AppContainer = Depends(get_container),
):
    row = await container.leave.reject(request_id, reviewer, payload.comments if payload else None)
    return LeaveRequestOut.from_row(row)


@router.get("/employees/{employee_id}/requests", response_model=list[LeaveRequestOut])
async def employee_requests(employee_id: uuid.UUID, container: AppContainer = Depends(get_container)):
    return [LeaveRequestOut.from_row(r) for r in await container.leave.employee_requests(employee_id)]


@router.get("/employees/{employee_id}/balance", response_model=list[LeaveBalanceOut])
async def employee_balance(
    employee_id: uuid.UUID,
    year: int | None = Query(default=None, ge=2000, le=2100),
    container: AppContainer = Depends(get_container),
):
    return await container.leave.employee_balance(employee_id, year)
