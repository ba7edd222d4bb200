"""
SNApp Backend: Test Configuration (conftest.py)
=================================================

Fixtures:
    mock_db_session: AsyncMock session for service unit tests (no database)
    make_note:       factory for Note ORM rows
    test_client:     HTTPX AsyncClient against the app, backed by a fresh
                     SQLite database per test and authenticated as USER_ID
"""

import os
import tempfile
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup (before any snapp import)
# ══════════════════════════════════════════════════════════════════════════

_test_dir = tempfile.mkdtemp(prefix="snapp_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_dir}/test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Mock AsyncSession.

    Usage:
        mock_db_session.execute.return_value = result_mock
        await note_service.get_note(mock_db_session, "user-1", 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_note():
    from snapp.models.note import Note

    def _make(note_id=1, name="New Note", content="", user_id=USER_ID):
        now = datetime.now(timezone.utc)
        return Note(
            note_id=note_id,
            user_id=user_id,
            name=name,
            content=content,
            created_at=now,
            updated_at=now,
        )

    return _make


@pytest_asyncio.fixture
async def test_client():
    """
    AsyncClient routed straight into the ASGI app.

    Tables are created before and dropped after each test. The engine is
    disposed on both ends so no pooled connection outlives its event loop.
    """
    from snapp.database import Base, engine
    from snapp.main import app
    from snapp.models.note import Note  # noqa: F401

    await engine.dispose()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-User-ID": USER_ID},
    ) as client:
        yield client

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
