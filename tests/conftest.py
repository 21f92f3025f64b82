import os

# Must be set before goalforge.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from goalforge.database import get_db, init_db
from goalforge.errors import AIServiceError
from goalforge.record_store import SqlRecordStore
from goalforge.routes.common import get_ai_service
from goalforge.schemas import DepartmentHead, Employee
from goalforge.services.ai_service import AIService


class FakeGenerator:
    """Stands in for the LLM router. Set `error` to make every call fail."""

    def __init__(self, text="generated", structured=None, error=None):
        self.text = text
        self.structured = structured
        self.error = error
        self.prompts = []

    async def generate_text(self, prompt, cache_ttl=0):
        self.prompts.append(prompt)
        if self.error:
            raise AIServiceError(self.error)
        return self.text

    async def generate_structured(self, prompt, schema, cache_ttl=0):
        self.prompts.append(prompt)
        if self.error:
            raise AIServiceError(self.error)
        return self.structured


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return SqlRecordStore(db)


@pytest.fixture
def employee(store):
    return store.upsert(Employee(name="Ana Lima", email="ana@example.com", department="Engineering"))


@pytest.fixture
def make_user(store):
    def _make(name, email, department=None, head=False):
        if head:
            return store.upsert(DepartmentHead(name=name, email=email, department=department))
        return store.upsert(Employee(name=name, email=email, department=department))
    return _make


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def client(session_factory, generator):
    from goalforge.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_service] = lambda: AIService(generator)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    resp = client.post(
        "/api/v1/auth/signup",
        json={"name": "Ana Lima", "email": "ana@example.com", "password": "s3cret-pass"},
    )
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}
