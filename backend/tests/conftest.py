import os

# Use in-memory sqlite for tests; must be set before the engine is created
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from runclub.db import Base, SessionLocal, engine  # noqa: E402
from runclub.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(client):
    """Create a user through the API and return (id, auth headers)."""

    def _make(user_name="runner", role="runner", goal=None):
        payload = {"user_name": user_name, "role": role}
        if goal is not None:
            payload["goal"] = goal
        r = client.post("/users/", json=payload)
        assert r.status_code == 201, r.text
        user_id = r.json()["id"]
        return user_id, {"X-User-Id": str(user_id)}

    return _make
