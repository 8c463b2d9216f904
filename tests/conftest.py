"""Pytest configuration and shared fixtures.

Scenario tests run against a throwaway SQLite file per test so concurrent
sessions really hit separate connections.
"""

import base64
import os
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Must be set before tracker_api.config is imported
TEST_AUTH_KEY = base64.b64encode(b"tracker-test-signing-key-0123456789").decode()
os.environ["TESTING"] = "true"
os.environ["AUTH_TOKEN_KEY"] = TEST_AUTH_KEY
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from jose import jwt  # noqa: E402

from tracker_api.config import decode_auth_token_key, settings  # noqa: E402

settings.testing = True

from tracker_api.database import get_db  # noqa: E402
from tracker_api.main import app  # noqa: E402
from tracker_api.models import Base  # noqa: E402


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    """Cheap bcrypt cost so tests that hash many codes stay fast."""
    monkeypatch.setattr(settings, "invite_code_hash_rounds", 4)
    monkeypatch.setattr(settings, "privileged_emails", [])


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'tracker.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests use the per-test SQLite database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_db, None)


def make_token(
    user_id: str,
    email: str | None = None,
    expires_in: timedelta = timedelta(hours=1),
    key: bytes | None = None,
) -> str:
    """Sign a token the way the chat service does."""
    payload = {"uid": user_id, "exp": datetime.now(UTC) + expires_in}
    if email is not None:
        payload["email"] = email
    return jwt.encode(
        payload,
        key if key is not None else decode_auth_token_key(),
        algorithm=settings.jwt_algorithm,
    )


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    def _headers(user_id: str, email: str | None = None) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id, email)}"}

    return _headers
