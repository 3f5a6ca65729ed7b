import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from jobboard.database import get_db, init_db
from jobboard.main import app
from jobboard.config import settings
from jobboard.services.throttle_service import list_throttle


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def tmp_data(tmp_path):
    data_path = tmp_path / "JobBoard"
    data_path.mkdir()
    return data_path


@pytest.fixture
def test_db(tmp_data):
    db_path = tmp_data / "jobboard.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture(autouse=True)
def fresh_throttle():
    list_throttle.reset()
    yield list_throttle
    list_throttle.reset()


@pytest.fixture
def client(tmp_data, test_db):
    original_data_path = settings.data_path
    settings.data_path = tmp_data
    c = TestClient(app)
    yield c
    settings.data_path = original_data_path


@pytest.fixture
def as_user():
    """Identity headers as the upstream auth layer would forward them."""
    def _as_user(user_id: str, role: str = "alumni", tenant_id: str = "tenant-1", name: str | None = None):
        headers = {"X-User-Id": user_id, "X-User-Role": role, "X-Tenant-Id": tenant_id}
        if name:
            headers["X-User-Name"] = name
        return headers
    return _as_user


@pytest.fixture
def job_payload():
    def _job_payload(**overrides):
        payload = {
            "company": "Acme Corp",
            "position": "Frontend Engineer",
            "location": "Berlin",
            "type": "full-time",
            "experience": "mid",
            "industry": "technology",
            "remote": False,
            "salary": {"min": 60000, "max": 80000, "currency": "EUR"},
            "vacancies": 2,
            "requirements": ["React", "TypeScript"],
            "benefits": ["Pension"],
            "tags": ["react", "frontend"],
            "description": "Build the alumni portal UI.",
        }
        payload.update(overrides)
        return payload
    return _job_payload


@pytest.fixture
def application_payload():
    def _application_payload(**overrides):
        payload = {
            "skills": ["React"],
            "experience": "5 years of frontend work",
            "contact_details": {"name": "A B", "email": "a@b.com", "phone": "1234567890"},
        }
        payload.update(overrides)
        return payload
    return _application_payload
