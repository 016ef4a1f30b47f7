import uuid

from fastapi import APIRouter, Depends

from hr_portal.container import AppContainer
from hr_portal.core.rbac import require_roles
from hr_portal.core.security import get_container
from hr_portal.schemas.payroll import PayrollOut, ProcessPayrollRequest

router = APIRouter(prefix="/payroll", tags=["payroll"], dependencies=[Depends(require_roles("hr"))])


@router.get("", response_model=list[PayrollOut])
async def list_payroll(container: AppContainer = Depends(get_container)):
    """Every payroll run, latest pay period first"""
    return [PayrollOut.from_row(r) for r in await container.payroll.list_payroll()]


@router.get("/employees/{employee_id}", response_model=list[PayrollOut])
async def employee_payroll(employee_id: uuid.UUID, container: AppContainer = Depends(get_container)):
    return [PayrollOut.from_row(r) for r in await container.payroll.employee_payroll(employee_id)]


@router.post("/{payroll_id}/process", response_model=PayrollOut)
async def process(
    payroll_id: uuid.UUID,
    payload: ProcessPayrollRequest,
    container: AppContainer = Depends(get_container),
):
    row = await container.payroll.process(payroll_id, payload.payment_method, payload.transaction_reference)
    return PayrollOut.from_row(row)


@router.post("/{payroll_id}/mark-paid", response_model=PayrollOut)
async def mark_paid(payroll_id: uuid.UUID, container: AppContainer = Depends(get_container)):
    return PayrollOut.from_row(await container.payroll.mark_paid(payroll_id))
