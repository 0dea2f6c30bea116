"""Integration-test fixtures.

These tests run against a live backend project with two pre-seeded accounts.
Export SUPABASE_URL, SUPABASE_ANON_KEY and SUPABASE_JWT_SECRET in the shell
(tests/conftest.py fills in dummy values otherwise) plus:

    ZP_IT_SENDER_EMAIL / ZP_IT_SENDER_PASSWORD   signs in and sends money
    ZP_IT_RECIPIENT_USERNAME                     receives it

Without them every test here is skipped. All tests share one event loop so the
module-level backend connection pool stays valid across the session.
"""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app

_REQUIRED = ("ZP_IT_SENDER_EMAIL", "ZP_IT_SENDER_PASSWORD", "ZP_IT_RECIPIENT_USERNAME")


@pytest.fixture(scope="session")
def live_accounts() -> dict[str, str]:
    missing = [name for name in _REQUIRED if not os.environ.get(name)]
    if missing:
        pytest.skip(f"live backend not configured: {', '.join(missing)}")
    return {name: os.environ[name] for name in _REQUIRED}


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client, keeps the connection pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def auth_client(client: AsyncClient, live_accounts: dict[str, str]) -> AsyncClient:
    """Client signed in as the seeded sender."""
    resp = await client.post("/api/v1/auth/login", json={
        "email": live_accounts["ZP_IT_SENDER_EMAIL"],
        "password": live_accounts["ZP_IT_SENDER_PASSWORD"],
    })
    assert resp.status_code == 200, resp.text
    token = resp.json()["data"]["access_token"]
    client.headers.update({"Authorization": f"Bearer {token}"})
    return client
