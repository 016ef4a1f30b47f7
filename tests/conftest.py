import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event

from hr_portal.core.config import BootstrapTimeouts, Settings
from hr_portal.db.base import Base
from hr_portal.db.session import build_engine, build_session_factory
from hr_portal.main import create_app
from tests.fakes import FakeSessionStore, InMemoryRecordStore

# short enough that timeout tests finish quickly, long enough that nothing else times out
FAST_TIMEOUTS = BootstrapTimeouts(
    mount_ceiling=2.0,
    load_user=1.0,
    profile_query=0.5,
    employee_query=0.5,
    lookup=0.2,
)


@pytest.fixture()
def database_url(tmp_path):
    # a file, not :memory:, because store calls run in worker threads
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture()
def engine(database_url):
    engine = build_engine(database_url)

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def settings(database_url):
    return Settings(
        APP_ENV="test",
        DATABASE_URL=database_url,
        LOG_LEVEL="WARNING",
        MOUNT_CEILING_SECONDS=5.0,
        LOAD_USER_TIMEOUT_SECONDS=5.0,
    )


@pytest.fixture()
def client(settings):
    # the context manager runs the lifespan, so the container exists and portals persist between requests
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture()
def app_db(client):
    """Session on the same database the app uses."""
    session = client.app.state.container.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def records():
    return InMemoryRecordStore()


@pytest.fixture()
def sessions():
    return FakeSessionStore()


@pytest.fixture()
def timeouts():
    return FAST_TIMEOUTS
