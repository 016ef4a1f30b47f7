import uuid

from hr_portal.core.errors import InvalidRequest
from hr_portal.core.logger import get_logger
from hr_portal.models.enums import ApplicationStatus, JobPostingStatus
from hr_portal.store.base import RecordStore, Row, require_one

logger = get_logger(__name__)

APPLICATION_STATUSES = frozenset(s.value for s in ApplicationStatus)


class RecruitmentService:
    def __init__(self, records: RecordStore):
        self._records = records

    async def job_postings(self, active_only: bool = False) -> list[Row]:
        filters = {"status": JobPostingStatus.ACTIVE.value} if active_only else None
        return await self._records.find_many("job_postings", filters, order_by="title")

    async def applications(self, job_posting_id: uuid.UUID | None = None, status: str | None = None) -> list[Row]:
        if status is not None and status not in APPLICATION_STATUSES:
            raise InvalidRequest(f"Unknown application status: {status}.")
        filters = {}
        if job_posting_id is not None:
            filters["job_posting_id"] = job_posting_id
        if status is not None:
            filters["status"] = status
        return await self._records.find_many(
            "applications", filters, expand=("job_posting",), order_by="applicant_name"
        )

    async def update_application_status(
        self,
        application_id: uuid.UUID,
        status: str,
        current_stage: str | None = None,
        notes: str | None = None,
    ) -> Row:
        """Stage and notes are left as they are unless given."""
        if status not in APPLICATION_STATUSES:
            raise InvalidRequest(f"Unknown application status: {status}.")
        await require_one(self._records, "applications", {"application_id": application_id}, "application")
        patch: Row = {"status": status}
        if current_stage is not None:
            patch["current_stage"] = current_stage
        if notes is not None:
            patch["notes"] = notes
        updated = await self._records.update("applications", {"application_id": application_id}, patch)
        logger.info("Application status changed", extra={"application_id": str(application_id), "status": status})
        return updated[0]
