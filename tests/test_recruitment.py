import uuid

import pytest

from hr_portal.core.errors import InvalidRequest, NotFoundError
from hr_portal.services.recruitment import RecruitmentService


@pytest.fixture()
def recruitment(records):
    return RecruitmentService(records)


@pytest.fixture()
def postings(records):
    engineer = records.seed("job_postings", title="Engineer", status="ACTIVE")
    designer = records.seed("job_postings", title="Designer", status="CLOSED")
    records.seed("applications", job_posting_id=engineer["job_posting_id"], applicant_name="Grace Hopper")
    records.seed("applications", job_posting_id=engineer["job_posting_id"], applicant_name="Alan Turing",
                 status="SHORTLISTED")
    records.seed("applications", job_posting_id=designer["job_posting_id"], applicant_name="Ada Lovelace")
    return engineer, designer


@pytest.mark.asyncio
async def test_job_postings(recruitment, postings):
    assert [p["title"] for p in await recruitment.job_postings()] == ["Designer", "Engineer"]
    assert [p["title"] for p in await recruitment.job_postings(active_only=True)] == ["Engineer"]


@pytest.mark.asyncio
async def test_applications_filters(recruitment, postings):
    engineer, _ = postings

    rows = await recruitment.applications(engineer["job_posting_id"])
    assert [r["applicant_name"] for r in rows] == ["Alan Turing", "Grace Hopper"]
    assert rows[0]["job_posting"]["title"] == "Engineer"

    rows = await recruitment.applications(status="SUBMITTED")
    assert [r["applicant_name"] for r in rows] == ["Ada Lovelace", "Grace Hopper"]

    with pytest.raises(InvalidRequest):
        await recruitment.applications(status="GHOSTED")


@pytest.mark.asyncio
async def test_update_status_keeps_unset_fields(recruitment, postings, records):
    application = records.tables["applications"][0]
    application["notes"] = "Strong portfolio"

    row = await recruitment.update_application_status(application["application_id"], "INTERVIEWED", "Onsite")

    assert row["status"] == "INTERVIEWED"
    assert row["current_stage"] == "Onsite"
    assert row["notes"] == "Strong portfolio"


@pytest.mark.asyncio
async def test_update_status_validates(recruitment, postings, records):
    with pytest.raises(InvalidRequest):
        await recruitment.update_application_status(records.tables["applications"][0]["application_id"], "MAYBE")
    with pytest.raises(NotFoundError):
        await recruitment.update_application_status(uuid.uuid4(), "HIRED")
