"""Shared test fixtures for Mythra-Engine."""

import os
import pytest
from httpx import ASGITransport, AsyncClient


API_KEY = "test-admin-api-key"
ORGANIZER_ID = "org-1"


@pytest.fixture
def api_key():
    return API_KEY


@pytest.fixture
def app():
    """Create a test app with in-memory DB."""
    os.environ["MYTHRA_DB_URL"] = "sqlite+aiosqlite://"
    os.environ["MYTHRA_API_KEY"] = API_KEY
    os.environ["MYTHRA_LEDGER_URL"] = ""

    # Clear caches and singletons so new env vars take effect
    from mythra_engine.common.config import get_settings
    get_settings.cache_clear()

    from mythra_engine.deps import reset_singletons
    reset_singletons()

    from mythra_engine.app import create_app
    return create_app()


@pytest.fixture
async def client(app):
    # Manually init DB since ASGITransport doesn't run lifespan
    from mythra_engine.deps import get_db
    db = get_db()
    await db.init()
    await db.create_all()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await db.close()


def actor_headers(actor_id: str, role: str, api_key: str | None = None) -> dict[str, str]:
    headers = {"X-Mythra-Actor-Id": actor_id, "X-Mythra-Role": role}
    if api_key:
        headers["X-Mythra-Api-Key"] = api_key
    return headers


@pytest.fixture
def admin_headers():
    return actor_headers("admin-1", "admin", API_KEY)


@pytest.fixture
def system_headers():
    return actor_headers("scheduler", "system", API_KEY)


@pytest.fixture
def organizer_headers():
    return actor_headers(ORGANIZER_ID, "organizer")


@pytest.fixture
def investor_headers():
    def _make(investor_id: str) -> dict[str, str]:
        return actor_headers(investor_id, "investor")
    return _make
