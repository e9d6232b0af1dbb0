"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from vertex.auth.service import seed_admin
from vertex.config import Settings, get_settings
from vertex.main import create_app
from vertex.store import SqlStore

ADMIN_EMAIL = "admin@vertex.com"
ADMIN_PASSWORD = "admin-pass-1"
USER_PASSWORD = "user-pass-1"


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Iterator[Settings]:
    """Settings pointing at a throwaway SQLite file."""
    monkeypatch.setenv("VERTEX_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("VERTEX_SUPABASE_URL", "")
    monkeypatch.setenv("VERTEX_SUPABASE_KEY", "")
    monkeypatch.setenv("VERTEX_JWT_SECRET", "test-secret-with-enough-length-for-hs256")
    monkeypatch.setenv("VERTEX_ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setenv("VERTEX_ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setenv("VERTEX_LOG_FORMAT", "console")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def store(settings: Settings) -> AsyncGenerator[SqlStore, None]:
    """Initialized SQL store with the admin account seeded."""
    sql_store = SqlStore(settings.database_url)
    await sql_store.init()
    await seed_admin(sql_store, settings)
    yield sql_store
    await sql_store.close()


@pytest_asyncio.fixture
async def client(store: SqlStore) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP test client bound to the test store."""
    app = create_app()
    app.state.store = store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def login(client: AsyncClient, email: str, password: str) -> str:
    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


async def register(client: AsyncClient, email: str, password: str = USER_PASSWORD) -> dict:
    response = await client.post("/api/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_headers(client: AsyncClient) -> dict[str, str]:
    """Authorization header for the seeded admin."""
    return bearer(await login(client, ADMIN_EMAIL, ADMIN_PASSWORD))


@pytest_asyncio.fixture
async def user_headers(client: AsyncClient) -> dict[str, str]:
    """Authorization header for a freshly registered regular user."""
    data = await register(client, "tipper@example.com")
    return bearer(data["token"])


@pytest.fixture
def prediction_payload() -> dict[str, str]:
    return {
        "match": "A vs B",
        "sport": "soccer",
        "odds": "1.8",
        "date": "2030-01-01",
        "tipster": "X",
    }
