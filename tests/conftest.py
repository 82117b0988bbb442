"""Pytest configuration and fixtures."""

import inspect

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.database import Base, get_db
from app.main import app
from app.routes.jobs import get_job_processor, get_job_store
from app.services.job_store import JobStore


class FakeLLM:
    """
    Stand-in for LLMClient that replays scripted responses.

    Each response is a string, an exception to raise, or an async callable
    awaited in place of the provider call.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    async def chat_completion(self, model, messages, **kwargs):
        self.calls.append({"model": model, "messages": messages, **kwargs})
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, BaseException):
            raise response
        if inspect.iscoroutinefunction(response):
            return await response()
        return response


class FakeProcessor:
    """Records submissions instead of running jobs."""

    def __init__(self):
        self.submitted = []

    def submit(self, job_id):
        self.submitted.append(job_id)


@pytest.fixture(scope="function")
def session_factory(tmp_path):
    """Create a test database for each test."""
    # File-backed so store calls from worker threads get their own connections
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    yield TestingSessionLocal

    engine.dispose()


@pytest.fixture
def store(session_factory):
    return JobStore(session_factory)


@pytest.fixture
def fake_processor():
    return FakeProcessor()


@pytest.fixture
def fake_llm():
    """Factory for scripted LLM clients."""
    return FakeLLM


@pytest.fixture
def client(session_factory, store, fake_processor):
    """API client wired to the test database and a recording processor."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_job_store] = lambda: store
    app.dependency_overrides[get_job_processor] = lambda: fake_processor

    yield TestClient(app)

    app.dependency_overrides.clear()
