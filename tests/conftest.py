"""Shared test fixtures."""

# ruff: noqa: E402  -- settings are read at import time, env must be set first

import os

os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-at-least-32-characters!")

from datetime import UTC, datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

from config.settings import settings
from src.main import app


def _make_access_token(
    user_id: str = "user-1",
    email: str = "alice@example.com",
    expires_in: timedelta = timedelta(minutes=30),
    **metadata: str,
) -> str:
    """Sign a token the way the hosted auth service does."""
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "email": email,
        "aud": settings.JWT_AUDIENCE,
        "role": "authenticated",
        "iat": now,
        "exp": now + expires_in,
        "user_metadata": metadata,
    }
    return str(jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm=settings.JWT_ALGORITHM))


@pytest.fixture
def make_token():
    """Factory for signed access tokens."""
    return _make_access_token


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
