from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

from hr_portal.models.enums import UserRole
from hr_portal.models.user import User
from tests.helpers import create_department, create_employee, record_attendance, sign_up_and_in


def test_first_request_mounts_and_sets_cookie(client):
    r = client.get("/auth/session")
    assert r.status_code == 200
    body = r.json()
    assert body["phase"] == "UNAUTHENTICATED"
    assert body["is_authenticated"] is False
    assert body["is_loading"] is False
    assert body["current_user"] is None
    assert "hr_portal_session" in r.cookies


def test_me_requires_sign_in(client):
    r = client.get("/me")
    assert r.status_code == 401


def test_sign_up_and_sign_in_provisions_employee(client, app_db):
    r = sign_up_and_in(client, "ada@example.com", first_name="Ada", last_name="Lovelace")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["phase"] == "AUTHENTICATED"
    assert body["role"] == "employee"
    assert body["current_user"]["email"] == "ada@example.com"
    assert body["current_user"]["role"] == "EMPLOYEE"
    assert body["current_user"]["last_login"] is not None

    me = client.get("/me")
    assert me.status_code == 200
    assert me.json()["email"] == "ada@example.com"

    employee = client.get("/me/employee")
    assert employee.status_code == 200
    emp = employee.json()
    assert emp["full_name"] == "Ada Lovelace"
    assert emp["employee_code"].startswith("EMP-")
    assert emp["employment_status"] == "ACTIVE"
    assert emp["email"] == "ada@example.com"
    assert emp["department"] is None

    user = app_db.query(User).filter(User.email == "ada@example.com").one()
    assert user.role == UserRole.EMPLOYEE.value


def test_session_survives_between_requests(client):
    sign_up_and_in(client, "ada@example.com")

    r = client.get("/auth/session")
    assert r.json()["phase"] == "AUTHENTICATED"


def test_duplicate_sign_up(client):
    payload = {"email": "ada@example.com", "password": "secret123", "first_name": "Ada", "last_name": "L"}
    assert client.post("/auth/sign-up", json=payload).status_code == 201

    r = client.post("/auth/sign-up", json=payload)
    assert r.status_code == 401
    assert r.json()["error_code"] == "AUTHENTICATION"
    assert r.json()["message"] == "An account with this email already exists."


def test_wrong_password(client):
    sign_up_and_in(client, "ada@example.com")
    client.post("/auth/sign-out")

    r = client.post("/auth/sign-in", json={"email": "ada@example.com", "password": "nope"})
    assert r.status_code == 401
    body = r.json()
    assert body["error_code"] == "AUTHENTICATION"
    assert body["message"] == "Invalid email or password."
    assert body["error_id"]

    # nothing is kept for a browser without a session
    state = client.get("/auth/session").json()
    assert state["phase"] == "UNAUTHENTICATED"
    assert state["notice"] is None


def test_sign_out(client):
    sign_up_and_in(client, "ada@example.com")

    r = client.post("/auth/sign-out")
    assert r.status_code == 200
    body = r.json()
    assert body["phase"] == "UNAUTHENTICATED"
    assert body["role"] == "employee"
    assert body["notice"] == {"level": "info", "message": "Logged out successfully", "error_id": None}

    assert client.get("/me").status_code == 401


def test_refresh(client):
    assert client.post("/auth/refresh").status_code == 401

    sign_up_and_in(client, "ada@example.com")
    r = client.post("/auth/refresh")
    assert r.status_code == 200
    assert "expires_at" in r.json()
    # the loaded profile is kept
    assert client.get("/auth/session").json()["phase"] == "AUTHENTICATED"


def test_portal_sessions_are_independent(client):
    sign_up_and_in(client, "ada@example.com")

    client.cookies.clear()
    r = client.get("/auth/session")
    assert r.json()["phase"] == "UNAUTHENTICATED"


def test_dashboard_requires_hr_role(client):
    assert client.get("/dashboard/stats").status_code == 401

    sign_up_and_in(client, "ada@example.com")
    assert client.get("/dashboard/stats").status_code == 403


def test_admin_sees_dashboards(client, app_db):
    r = sign_up_and_in(client, "boss@example.com", role="ADMIN", first_name="Boss", last_name="Person")
    assert r.json()["role"] == "hr"

    eng = create_department(app_db, "Engineering")
    worker = create_employee(app_db, "EMP-9001", "Alan", "Turing", department=eng)
    record_attendance(app_db, worker, date.today(), "PRESENT")

    stats = client.get("/dashboard/stats")
    assert stats.status_code == 200
    body = stats.json()
    assert body["total_employees"] == 2
    assert body["present_today"] == 1
    assert body["attendance_rate"] == "50.0%"

    departments = client.get("/dashboard/departments").json()
    assert departments == [{"id": str(eng.department_id), "name": "Engineering", "count": 1}]

    assert client.get("/dashboard/employees/status").json() == {"ACTIVE": 2}
    assert client.get("/dashboard/recruitment").json()["hire_rate"] == 0.0
    assert client.get("/dashboard/attendance").json()["present"] == 1
    assert client.get("/dashboard/top-performers").json() == []

    rating = client.get(f"/dashboard/employees/{worker.employee_id}/rating").json()
    assert rating["average_rating"] == 0.0


def test_my_stats(client, app_db):
    sign_up_and_in(client, "ada@example.com")
    r = client.get("/me/stats")
    assert r.status_code == 200
    body = r.json()
    assert body["hours_this_week"] == 0.0
    assert body["goal_completion"] == 0.0

    attendance = client.get("/me/attendance")
    assert attendance.status_code == 200
    assert attendance.json()["total"] == 0


def test_cookie_less_requests_keep_no_portals(client):
    for _ in range(20):
        client.cookies.clear()
        assert client.get("/auth/session").status_code == 200
    client.cookies.clear()
    client.post("/auth/sign-out")

    assert len(client.app.state.container.portals) == 0


def test_only_signed_in_portals_are_kept(client):
    portals = client.app.state.container.portals
    sign_up_and_in(client, "ada@example.com")
    assert len(portals) == 1

    client.post("/auth/sign-out")
    assert len(portals) == 0


def test_refresh_of_expired_session_rotates_once(client, monkeypatch):
    sign_up_and_in(client, "ada@example.com")
    container = client.app.state.container
    portal = container.portals.find(client.cookies["hr_portal_session"])
    stored = portal.sessions.current
    portal.sessions._session = replace(stored, expires_at=datetime.now(timezone.utc) - timedelta(seconds=1))

    provider = container.identity_provider
    calls = []
    original = provider.refresh

    def counting_refresh(refresh_token):
        calls.append(refresh_token)
        return original(refresh_token)

    monkeypatch.setattr(provider, "refresh", counting_refresh)

    r = client.post("/auth/refresh")

    assert r.status_code == 200
    assert calls == [stored.refresh_token]
    assert portal.sessions.current.access_token != stored.access_token
