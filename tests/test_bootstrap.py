import asyncio
from dataclasses import replace

import pytest
import pytest_asyncio

from hr_portal.core.errors import AuthenticationError, ProvisioningFailure, TransientStoreError
from hr_portal.identity.base import AuthEventType
from hr_portal.services.auth import AuthService
from hr_portal.services.bootstrap import (
    LOAD_FAILED_MESSAGE,
    SIGNED_OUT_MESSAGE,
    SLOW_CONNECTION_MESSAGE,
    Phase,
    SessionBootstrap,
)
from hr_portal.services.provisioning import AccountProvisioner


def _seed_profile(records, identity, role="EMPLOYEE"):
    records.seed("users", user_id=identity.subject_id, email=identity.email, role=role, is_active=True)
    records.seed(
        "employees",
        user_id=identity.subject_id,
        first_name="Ada",
        last_name="Lovelace",
        employee_code="EMP-0001",
        employment_status="ACTIVE",
    )


@pytest.fixture()
def auth(sessions, records, timeouts):
    return AuthService(sessions, records, AccountProvisioner(records), timeouts)


@pytest_asyncio.fixture()
async def bootstrap(auth, sessions, timeouts):
    b = SessionBootstrap(auth, sessions, timeouts)
    yield b
    await b.close()


# mount


@pytest.mark.asyncio
async def test_mount_without_session_shows_login(bootstrap):
    state = await bootstrap.mount()

    assert state.phase is Phase.UNAUTHENTICATED
    assert not state.is_loading
    assert state.current_user is None
    assert state.role == "employee"
    assert state.notice is None


@pytest.mark.asyncio
async def test_mount_with_existing_session_loads_user(bootstrap, sessions, records):
    identity = sessions.add_account("hr@example.com")
    _seed_profile(records, identity, role="ADMIN")
    sessions.restore(identity)

    state = await bootstrap.mount()

    assert state.phase is Phase.AUTHENTICATED
    assert state.is_authenticated
    assert state.role == "hr"
    assert state.current_user.email == "hr@example.com"
    assert not state.current_user.is_fallback


@pytest.mark.asyncio
async def test_mount_session_check_error_shows_login(bootstrap, sessions):
    sessions.get_session_error = TransientStoreError("auth_sessions", "get_session", "connection refused")

    state = await bootstrap.mount()

    assert state.phase is Phase.UNAUTHENTICATED
    assert not state.is_loading
    assert sessions.sign_out_calls == 0


@pytest.mark.asyncio
async def test_mount_ceiling_cancels_initial_load(auth, sessions, records, timeouts):
    identity = sessions.add_account("slow@example.com")
    _seed_profile(records, identity)
    sessions.restore(identity)
    sessions.get_session_delay = 0.5

    bootstrap = SessionBootstrap(auth, sessions, replace(timeouts, mount_ceiling=0.1))
    try:
        state = await bootstrap.mount()
        assert state.phase is Phase.UNAUTHENTICATED
        assert not state.is_loading
        assert state.notice.level == "warning"
        assert state.notice.message == SLOW_CONNECTION_MESSAGE

        # the abandoned load never comes back to flip the view
        await asyncio.sleep(0.7)
        assert bootstrap.state.phase is Phase.UNAUTHENTICATED
        assert sessions.identity_calls == 0
        assert sessions.sign_out_calls == 0
    finally:
        await bootstrap.close()


@pytest.mark.asyncio
async def test_mount_is_idempotent(bootstrap, sessions):
    await bootstrap.mount()
    await bootstrap.mount()
    assert len(sessions._channels) == 1


# sign-in


@pytest.mark.asyncio
async def test_fresh_sign_in_provisions_and_authenticates(bootstrap, auth, sessions, records):
    await bootstrap.mount()
    await auth.sign_up("new@example.com", "secret123", "Grace", "Hopper")

    state = await bootstrap.sign_in("new@example.com", "secret123")

    assert state.phase is Phase.AUTHENTICATED
    assert state.role == "employee"
    assert state.notice is None
    assert state.current_user.role == "EMPLOYEE"
    assert state.current_user.last_login is not None

    [employee] = records.tables["employees"]
    assert employee["first_name"] == "Grace"
    assert employee["employee_code"].startswith("EMP-")
    assert len(records.tables["users"]) == 1


@pytest.mark.asyncio
async def test_admin_sign_up_gets_hr_view(bootstrap, auth):
    await bootstrap.mount()
    await auth.sign_up("boss@example.com", "secret123", "Ada", "Admin", role="ADMIN")

    state = await bootstrap.sign_in("boss@example.com", "secret123")

    assert state.role == "hr"
    assert state.current_user.role == "ADMIN"


@pytest.mark.asyncio
async def test_sign_in_again_does_not_duplicate_records(bootstrap, auth, records):
    await bootstrap.mount()
    await auth.sign_up("twice@example.com", "secret123", "Ada", "Lovelace")

    await bootstrap.sign_in("twice@example.com", "secret123")
    await bootstrap.sign_out()
    state = await bootstrap.sign_in("twice@example.com", "secret123")

    assert state.phase is Phase.AUTHENTICATED
    assert len(records.tables["users"]) == 1
    assert len(records.tables["employees"]) == 1


@pytest.mark.asyncio
async def test_provisioning_failure_signs_out_and_propagates(bootstrap, auth, sessions, records):
    await bootstrap.mount()
    await auth.sign_up("broken@example.com", "secret123", "Ada", "Lovelace")
    records.fail("employees", "insert")

    with pytest.raises(ProvisioningFailure) as exc_info:
        await bootstrap.sign_in("broken@example.com", "secret123")

    assert exc_info.value.table == "employees"
    assert sessions.sign_out_calls == 1
    assert sessions.session is None

    state = bootstrap.state
    assert state.phase is Phase.UNAUTHENTICATED
    assert state.current_user is None
    assert state.notice.level == "error"
    assert "contact support" in state.notice.message


@pytest.mark.asyncio
async def test_bad_password_surfaces_error_notice(bootstrap, sessions):
    sessions.add_account("ada@example.com", "secret123")
    await bootstrap.mount()

    with pytest.raises(AuthenticationError):
        await bootstrap.sign_in("ada@example.com", "wrong")

    assert bootstrap.state.phase is Phase.UNAUTHENTICATED
    assert bootstrap.state.notice.message == "Invalid email or password."
    assert sessions.sign_out_calls == 0


# load user outcomes


@pytest.mark.asyncio
async def test_load_timeout_keeps_session(auth, sessions, records, timeouts):
    identity = sessions.add_account("slow@example.com")
    _seed_profile(records, identity)
    sessions.restore(identity)
    sessions.identity_delay = 0.5

    async with SessionBootstrap(auth, sessions, replace(timeouts, load_user=0.1)) as bootstrap:
        state = bootstrap.state

    assert state.phase is Phase.UNAUTHENTICATED
    assert not state.is_loading
    assert state.notice.level == "warning"
    assert state.notice.message == SLOW_CONNECTION_MESSAGE
    assert sessions.sign_out_calls == 0
    assert sessions.session is not None


@pytest.mark.asyncio
async def test_profile_query_timeout_uses_fallback_profile(bootstrap, sessions, records):
    identity = sessions.add_account("lag@example.com")
    _seed_profile(records, identity, role="ADMIN")
    sessions.restore(identity)
    records.delay("users", "find_one", 1.0)

    state = await bootstrap.mount()

    assert state.phase is Phase.AUTHENTICATED
    assert state.current_user.is_fallback
    assert state.current_user.role == "EMPLOYEE"
    assert state.role == "employee"
    assert state.current_user.email == "lag@example.com"


@pytest.mark.asyncio
async def test_missing_profile_row_uses_fallback_profile(bootstrap, sessions):
    sessions.restore(sessions.add_account("orphan@example.com"))

    state = await bootstrap.mount()

    assert state.phase is Phase.AUTHENTICATED
    assert state.current_user.is_fallback


@pytest.mark.asyncio
async def test_null_profile_signs_out_exactly_once(bootstrap, sessions, records):
    identity = sessions.add_account("revoked@example.com")
    _seed_profile(records, identity)
    sessions.restore(identity)
    sessions.identity_revoked = True

    await bootstrap.mount()
    state = await bootstrap.settle()

    assert sessions.sign_out_calls == 1
    assert state.phase is Phase.UNAUTHENTICATED
    assert not state.is_loading
    assert state.notice.level == "error"
    assert state.notice.message == LOAD_FAILED_MESSAGE


@pytest.mark.asyncio
async def test_load_error_signs_out_with_error_notice(bootstrap, sessions, records, monkeypatch):
    identity = sessions.add_account("err@example.com")
    _seed_profile(records, identity)
    sessions.restore(identity)

    async def broken():
        raise TransientStoreError("users", "find_one", "connection reset")

    monkeypatch.setattr(bootstrap._auth, "get_current_user", broken)

    await bootstrap.mount()
    state = await bootstrap.settle()

    assert sessions.sign_out_calls == 1
    assert state.phase is Phase.UNAUTHENTICATED
    assert state.notice.message == LOAD_FAILED_MESSAGE
    assert state.notice.error_id


# events


@pytest.mark.asyncio
async def test_token_refreshed_is_a_no_op(bootstrap, auth, sessions):
    sessions.add_account("ada@example.com", "secret123")
    await bootstrap.mount()
    before = await bootstrap.sign_in("ada@example.com", "secret123")
    calls = sessions.identity_calls

    await auth.refresh_session()
    after = await bootstrap.settle()

    assert after is before
    assert sessions.identity_calls == calls


@pytest.mark.asyncio
async def test_stale_signed_in_event_is_ignored(bootstrap, sessions):
    identity = sessions.add_account("ghost@example.com")
    await bootstrap.mount()

    # a SIGNED_IN for a session that is not the store's current one
    sessions.emit(AuthEventType.SIGNED_IN, sessions.issue(identity))
    state = await bootstrap.settle()

    assert state.phase is Phase.UNAUTHENTICATED
    assert sessions.identity_calls == 0


@pytest.mark.asyncio
async def test_signed_in_while_authenticated_is_ignored(bootstrap, sessions):
    sessions.add_account("ada@example.com", "secret123")
    await bootstrap.mount()
    await bootstrap.sign_in("ada@example.com", "secret123")
    calls = sessions.identity_calls

    sessions.emit(AuthEventType.SIGNED_IN, sessions.session)
    await bootstrap.settle()

    assert sessions.identity_calls == calls


@pytest.mark.asyncio
async def test_duplicate_signed_in_during_load_starts_one_load(bootstrap, sessions, records):
    sessions.add_account("ada@example.com", "secret123")
    await bootstrap.mount()
    records.delay("users", "find_one", 0.2)

    sign_in = asyncio.create_task(bootstrap.sign_in("ada@example.com", "secret123"))
    await asyncio.sleep(0.05)
    sessions.emit(AuthEventType.SIGNED_IN, sessions.session)
    state = await sign_in

    assert state.phase is Phase.AUTHENTICATED
    assert sessions.identity_calls == 1


@pytest.mark.asyncio
async def test_signed_out_cancels_in_flight_load(bootstrap, sessions, records):
    identity = sessions.add_account("ada@example.com")
    _seed_profile(records, identity)
    sessions.restore(identity)
    sessions.identity_delay = 0.3

    mount = asyncio.create_task(bootstrap.mount())
    await asyncio.sleep(0.05)
    await sessions.sign_out()
    state = await mount

    assert state.phase is Phase.UNAUTHENTICATED
    await asyncio.sleep(0.4)
    assert bootstrap.state.phase is Phase.UNAUTHENTICATED
    assert bootstrap.state.current_user is None


@pytest.mark.asyncio
async def test_sign_out_resets_view(bootstrap, sessions, records):
    identity = sessions.add_account("hr@example.com", "secret123", role="ADMIN")
    await bootstrap.mount()
    await bootstrap.sign_in("hr@example.com", "secret123")
    assert bootstrap.state.role == "hr"

    state = await bootstrap.sign_out()

    assert state.phase is Phase.UNAUTHENTICATED
    assert state.current_user is None
    assert state.role == "employee"
    assert state.notice.level == "info"
    assert state.notice.message == SIGNED_OUT_MESSAGE
    assert sessions.sign_out_calls == 1


@pytest.mark.asyncio
async def test_close_releases_channel_and_tasks(auth, sessions):
    bootstrap = SessionBootstrap(auth, sessions)
    await bootstrap.mount()
    listener = bootstrap._listener

    await bootstrap.close()

    assert listener.done()
    assert sessions._channels == set()
