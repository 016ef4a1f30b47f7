import uuid

from fastapi import APIRouter, Depends

from hr_portal.container import AppContainer
from hr_portal.core.rbac import require_roles
from hr_portal.core.security import get_container
from hr_portal.schemas.recruitment import ApplicationOut, ApplicationStatusUpdate, JobPostingOut

router = APIRouter(prefix="/recruitment", tags=["recruitment"], dependencies=[Depends(require_roles("hr"))])


@router.get("/job-postings", response_model=list[JobPostingOut])
async def job_postings(active_only: bool = False, container: AppContainer = Depends(get_container)):
    return [JobPostingOut.from_row(r) for r in await container.recruitment.job_postings(active_only)]


@router.get("/applications", response_model=list[ApplicationOut])
async def applications(
    job_posting_id: uuid.UUID | None = None,
    status: str | None = None,
    container: AppContainer = Depends(get_container),
):
    rows = await container.recruitment.applications(job_posting_id, status)
    return [ApplicationOut.from_row(r) for r in rows]


@router.patch("/applications/{application_id}/status", response_model=ApplicationOut)
async def update_application_status(
    application_id: uuid.UUID,
    payload: ApplicationStatusUpdate,
    container: AppContainer = Depends(get_container),
):
    row = await container.recruitment.update_application_status(
        application_id, payload.status, payload.current_stage, payload.notes
    )
    return ApplicationOut.from_row(row)
