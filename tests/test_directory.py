import uuid

import pytest

from hr_portal.core.errors import InvalidRequest, NotFoundError
from hr_portal.services.directory import EmployeeDirectory
from tests.helpers import seed_employee


@pytest.fixture()
def directory(records):
    return EmployeeDirectory(records)


@pytest.fixture()
def staff(records):
    eng = records.seed("departments", department_name="Engineering")
    ops = records.seed("departments", department_name="Operations")
    dev = records.seed("positions", position_title="Developer", department_id=eng["department_id"])
    return {
        "eng": eng,
        "ops": ops,
        "dev": dev,
        "ada": seed_employee(records, "EMP-0001", "Ada", "Lovelace", department_id=eng["department_id"],
                             position_id=dev["position_id"]),
        "alan": seed_employee(records, "EMP-0002", "Alan", "Turing", department_id=eng["department_id"]),
        "grace": seed_employee(records, "OPS-0001", "Grace", "Hopper", department_id=ops["department_id"]),
    }


@pytest.mark.asyncio
async def test_list_is_ordered_by_last_name(directory, staff):
    rows = await directory.list_employees()

    assert [r["last_name"] for r in rows] == ["Hopper", "Lovelace", "Turing"]
    assert rows[1]["department"]["department_name"] == "Engineering"
    assert rows[1]["position"]["position_title"] == "Developer"


@pytest.mark.asyncio
async def test_list_pages(directory, staff):
    rows = await directory.list_employees(limit=1, offset=1)
    assert [r["last_name"] for r in rows] == ["Lovelace"]


@pytest.mark.asyncio
async def test_search_matches_names_and_codes(directory, staff):
    assert [r["first_name"] for r in await directory.search("tur")] == ["Alan"]
    assert [r["first_name"] for r in await directory.search("ops-")] == ["Grace"]
    assert [r["first_name"] for r in await directory.search("a")] == ["Grace", "Ada", "Alan"]
    assert await directory.count("emp-") == 2


@pytest.mark.asyncio
async def test_blank_search_lists_everyone(directory, staff):
    assert len(await directory.search("   ")) == 3
    assert await directory.count("") == 3


@pytest.mark.asyncio
async def test_by_department(directory, staff):
    rows = await directory.by_department(staff["eng"]["department_id"])
    assert [r["first_name"] for r in rows] == ["Ada", "Alan"]

    with pytest.raises(NotFoundError):
        await directory.by_department(uuid.uuid4())


@pytest.mark.asyncio
async def test_get_missing_employee(directory):
    with pytest.raises(NotFoundError) as exc:
        await directory.get_employee(uuid.uuid4())
    assert exc.value.entity == "employee"


@pytest.mark.asyncio
async def test_update_employee(directory, staff, records):
    row = await directory.update_employee(
        staff["alan"]["employee_id"],
        {"department_id": staff["ops"]["department_id"], "employment_status": "ON_LEAVE"},
    )

    assert row["department"]["department_name"] == "Operations"
    assert row["employment_status"] == "ON_LEAVE"
    assert records.tables["employees"][1]["employment_status"] == "ON_LEAVE"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "changes",
    [
        {"employee_code": "EMP-9999"},
        {"user_id": uuid.uuid4()},
        {"employment_status": "RETIRED"},
        {"employment_status": None},
        {"first_name": "  "},
    ],
)
async def test_update_employee_rejects_bad_changes(directory, staff, records, changes):
    with pytest.raises(InvalidRequest):
        await directory.update_employee(staff["ada"]["employee_id"], changes)
    assert records.count_calls("employees", "update") == 0


@pytest.mark.asyncio
async def test_update_employee_checks_references(directory, staff):
    with pytest.raises(NotFoundError) as exc:
        await directory.update_employee(staff["ada"]["employee_id"], {"position_id": uuid.uuid4()})
    assert exc.value.entity == "position"


@pytest.mark.asyncio
async def test_catalogues(directory, staff):
    assert [d["department_name"] for d in await directory.departments()] == ["Engineering", "Operations"]
    assert [p["position_title"] for p in await directory.positions(staff["eng"]["department_id"])] == ["Developer"]
    assert await directory.positions(staff["ops"]["department_id"]) == []
