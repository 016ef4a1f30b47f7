from pydantic import BaseModel, Field

from hr_portal.store.base import Row


class JobPostingOut(BaseModel):
    job_posting_id: str
    title: str
    status: str

    @classmethod
    def from_row(cls, row: Row) -> "JobPostingOut":
        return cls(job_posting_id=str(row["job_posting_id"]), title=row["title"], status=row["status"])


class ApplicationOut(BaseModel):
    application_id: str
    job_posting_id: str
    applicant_name: str
    status: str
    current_stage: str | None = None
    notes: str | None = None
    job_posting: JobPostingOut | None = None

    @classmethod
    def from_row(cls, row: Row) -> "ApplicationOut":
        posting = row.get("job_posting")
        return cls(
            application_id=str(row["application_id"]),
            job_posting_id=str(row["job_posting_id"]),
            applicant_name=row["applicant_name"],
            status=row["status"],
            current_stage=row.get("current_stage"),
            notes=row.get("notes"),
            job_posting=JobPostingOut.from_row(posting) if posting else None,
        )


class ApplicationStatusUpdate(BaseModel):
    status: str
    current_stage: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=1000)
