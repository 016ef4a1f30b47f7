import uuid

from fastapi import APIRouter, Depends, Query

from hr_portal.container import AppContainer
from hr_portal.core.rbac import require_roles
from hr_portal.core.security import get_container
from hr_portal.schemas.directory import EmployeeOut, EmployeePage, EmployeeUpdate, PositionRowOut
from hr_portal.schemas.employee import DepartmentOut

router = APIRouter(tags=["directory"], dependencies=[Depends(require_roles("hr"))])


@router.get("/employees", response_model=EmployeePage)
async def list_employees(
    q: str = Query(default="", max_length=100, description="Name or employee code"),
    department_id: uuid.UUID | None = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    container: AppContainer = Depends(get_container),
):
    directory = container.directory
    if department_id is not None:
        rows = await directory.by_department(department_id)
        return EmployeePage(total=len(rows), items=[EmployeeOut.from_row(r) for r in rows[offset:offset + limit]])
    rows = await directory.search(q, limit, offset)
    return EmployeePage(total=await directory.count(q), items=[EmployeeOut.from_row(r) for r in rows])


@router.get("/employees/{employee_id}", response_model=EmployeeOut)
async def get_employee(employee_id: uuid.UUID, container: AppContainer = Depends(get_container)):
    return EmployeeOut.from_row(await container.directory.get_employee(employee_id))


@router.patch("/employees/{employee_id}", response_model=EmployeeOut)
async def update_employee(
    employee_id: uuid.UUID,
    payload: EmployeeUpdate,
    container: AppContainer = Depends(get_container),
):
    changes = payload.model_dump(exclude_unset=True)
    return EmployeeOut.from_row(await container.directory.update_employee(employee_id, changes))


@router.get("/departments", response_model=list[DepartmentOut])
async def departments(container: AppContainer = Depends(get_container)):
    rows = await container.directory.departments()
    return [DepartmentOut(id=str(r["department_id"]), name=r["department_name"]) for r in rows]


@router.get("/positions", response_model=list[PositionRowOut])
async def positions(department_id: uuid.UUID | None = None, container: AppContainer = Depends(get_container)):
    return [PositionRowOut.from_row(r) for r in await container.directory.positions(department_id)]
