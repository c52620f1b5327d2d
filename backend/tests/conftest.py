import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from career_coach.ai.errors import ErrorKind

USER_HEADERS = {"X-User-Id": "dev_user_1", "X-User-Name": "Dev Local", "X-User-Email": "dev@example.com"}


class FakeAIClient:
    """Scripted stand-in for AIClient: each call pops the next item; exceptions are raised."""

    def __init__(self, chat=None, gemini=None):
        self.chat_script = list(chat or [])
        self.gemini_script = list(gemini or [])
        self.chat_calls = []
        self.gemini_calls = []

    @staticmethod
    def _next(script):
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, BaseException):
            raise item
        return item

    async def chat_completion(self, messages, *, model=None, temperature=0.7, max_tokens=1000):
        self.chat_calls.append(messages)
        return self._next(self.chat_script)

    async def generate_content(self, prompt, *, model=None):
        self.gemini_calls.append(prompt)
        return self._next(self.gemini_script)


@pytest.fixture
def settings():
    from career_coach.config import Settings

    return Settings(
        openai_api_key="test-openai",
        gemini_api_key="test-gemini",
        max_retries=2,
        initial_delay_ms=1,
        fallback_on=frozenset({ErrorKind.QUOTA_EXCEEDED, ErrorKind.RATE_LIMITED}),
    )


@pytest.fixture
def fake_ai():
    return FakeAIClient(chat=["AI generated text"], gemini=["{}"])


@pytest.fixture
def session_factory(tmp_path):
    """Sessions on an isolated SQLite DB file under tmp_path."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False}
    )
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def client(tmp_path, monkeypatch, settings, fake_ai, session_factory):
    """Provide a FastAPI TestClient with an isolated SQLite DB and a fake AI client."""
    # Ensure backend package is importable
    backend_root = Path(__file__).resolve().parents[1]
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))

    # Avoid accidental usage of real API keys during tests
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.setenv("DEV_USER_ID", "")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'bootstrap.db'}")

    from career_coach import config
    config.get_settings.cache_clear()

    # Import DB after env is set
    from career_coach import db  # type: ignore
    # Ensure models are registered on Base before create_all
    import career_coach.models  # noqa: F401

    engine = session_factory.kw["bind"]

    # Ensure the app uses this engine when main.py imports it
    db.engine = engine  # type: ignore[attr-defined]

    # Create schema on the test engine
    db.Base.metadata.create_all(bind=engine)

    # Dependency override to use the test DB session
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    from career_coach.main import app  # type: ignore
    from career_coach.api import deps

    app.dependency_overrides[db.get_db] = override_get_db
    app.dependency_overrides[config.get_settings] = lambda: settings
    app.dependency_overrides[deps.get_ai] = lambda: fake_ai

    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def db_session(client, session_factory):
    """A session on the same database the app under test uses."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
