"""
MindPad Backend — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the whole suite.
How:   Environment variables are set before any `mindpad` import so the
       settings singleton, the engine and the service singletons pick up
       test values. Store tests run against a fresh SQLite file per test.

Fixture Hierarchy (all function-scoped):
    ├── db_engine / session_factory / db_session: SQLite via aiosqlite,
    │   schema created with Base.metadata.create_all
    ├── user_id / other_user_id / auth_headers: sessions for two users
    ├── make_note / fake_client / notifier: client view-model doubles
    ├── llm: AsyncMock ChatCompletionService returning canned text
    ├── assistant: AssistantService over `llm` and the test database
    ├── app: the FastAPI app with DB and assistant dependencies overridden
    ├── test_client: httpx AsyncClient over ASGITransport
    └── mock_db_session: AsyncMock session for failure-path tests
"""

import os
import tempfile

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup (before any mindpad import)
# ══════════════════════════════════════════════════════════════════════════

_TEST_DIR = tempfile.mkdtemp(prefix="mindpad_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/mindpad.db"
os.environ["AI_GATEWAY_API_KEY"] = "test-gateway-key"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-mindpad-sessions"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from mindpad.database import Base, enable_sqlite_foreign_keys  # noqa: E402
from mindpad.models.ai_history import AIHistory  # noqa: E402,F401
from mindpad.models.note import Note  # noqa: E402,F401
from mindpad.services.assistant_service import AssistantService  # noqa: E402
from mindpad.services.auth_service import auth_service  # noqa: E402
from mindpad.services.llm_base import ChatCompletionService  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    AsyncMock standing in for AsyncSession.

    Usage:
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception())
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Users & Sessions
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def other_user_id():
    return uuid4()


@pytest.fixture
def access_token(user_id):
    return auth_service.create_access_token(user_id, email="ada@example.com")


@pytest.fixture
def auth_headers(access_token):
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def other_auth_headers(other_user_id):
    token = auth_service.create_access_token(other_user_id, email="grace@example.com")
    return {"Authorization": f"Bearer {token}"}


# ══════════════════════════════════════════════════════════════════════════
# AI
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def llm():
    """Completion backend that answers every request with "Generated text"."""
    service = AsyncMock(spec=ChatCompletionService)
    service.is_configured = True
    service.complete.return_value = "Generated text"
    return service


@pytest.fixture
def assistant(llm, session_factory):
    return AssistantService(llm=llm, session_factory=session_factory)


# ══════════════════════════════════════════════════════════════════════════
# Application
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(session_factory, assistant):
    """The FastAPI app wired to the per-test database and AI double."""
    from mindpad.database import get_db_session
    from mindpad.main import app as fastapi_app
    from mindpad.routes.assistant import get_assistant_service

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db_session] = override_db_session
    fastapi_app.dependency_overrides[get_assistant_service] = lambda: assistant
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_client(app):
    """
    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Client view-models
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_note(user_id):
    """
    Factory for NoteResponse values.

    Usage:
        note = make_note(title="Plan", minutes_ago=5)
    """
    from datetime import datetime, timedelta, timezone

    from mindpad.schemas.note import NoteResponse

    def factory(title="Untitled", content="", minutes_ago=0, note_id=None):
        stamp = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc) - timedelta(minutes=minutes_ago)
        return NoteResponse(
            id=note_id or uuid4(),
            user_id=user_id,
            title=title,
            content=content,
            created_at=stamp,
            updated_at=stamp,
        )

    return factory


@pytest.fixture
def fake_client():
    """MindPadClient double; every API method is an AsyncMock."""
    from mindpad.client.api import MindPadClient

    client = AsyncMock(spec=MindPadClient)
    client.set_token = MagicMock()
    client.list_notes.return_value = []
    client.list_history.return_value = []
    return client


@pytest.fixture
def notifier():
    from mindpad.client.notifications import Notifier

    return Notifier()
