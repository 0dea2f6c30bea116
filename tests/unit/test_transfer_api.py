"""Send-money API driven end to end through the ASGI app with a mock backend."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from src.main import app
from src.zp_backend.domain.models import Profile, TransferResult
from src.zp_gateway.auth.dependencies import get_user_backend
from src.zp_transfer.application.registry import get_registry

API = "/api/v1/transfer"


def _make_profile(user_id: str, username: str, balance: str = "1000.00") -> Profile:
    return Profile(
        id=user_id,
        email=f"{username}@example.com",
        full_name=username.title(),
        username=username,
        phone_number="+263773049503",
        balance=Decimal(balance),
    )


@pytest.fixture
def backend() -> AsyncMock:
    backend = AsyncMock()
    backend.get_profile.return_value = _make_profile("user-1", "alice")
    backend.find_profile_by_username.return_value = _make_profile("user-2", "tendai", "5.00")
    backend.search_profiles_by_username.return_value = []
    backend.transfer_money.return_value = TransferResult(success=True)
    app.dependency_overrides[get_user_backend] = lambda: backend
    yield backend
    get_registry().close_all()


@pytest.fixture
def auth_headers(make_token) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token('user-1')}"}


async def test_requires_token(client: AsyncClient, backend: AsyncMock) -> None:
    resp = await client.post(API)
    assert resp.status_code == 401


async def test_no_active_transfer(
    client: AsyncClient, backend: AsyncMock, auth_headers: dict[str, str]
) -> None:
    resp = await client.get(API, headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["code"] == 4011


async def test_full_send_money_flow(
    client: AsyncClient, backend: AsyncMock, auth_headers: dict[str, str]
) -> None:
    resp = await client.post(API, headers=auth_headers)
    assert resp.status_code == 201
    assert resp.json()["data"]["step"] == "entry"
    assert resp.json()["data"]["available_balance_display"] == "$1,000.00"

    resp = await client.post(f"{API}/search", json={"text": "@tendai"}, headers=auth_headers)
    data = resp.json()["data"]
    assert data["recipient"]["username"] == "tendai"
    assert "balance" not in data["recipient"]

    resp = await client.put(
        f"{API}/details", json={"amount": "1", "note": "lunch"}, headers=auth_headers
    )
    assert resp.json()["data"]["amount_display"] == "$1.00"

    resp = await client.post(f"{API}/continue", headers=auth_headers)
    assert resp.json()["data"]["step"] == "confirm"

    resp = await client.post(f"{API}/confirm", headers=auth_headers)
    body = resp.json()
    assert resp.status_code == 200
    assert body["message"] == "Transfer successful"
    assert body["data"]["step"] == "success"
    assert body["data"]["sent_amount_display"] == "$1.00"
    backend.transfer_money.assert_awaited_once_with("user-1", "tendai", Decimal("1.00"), "lunch")

    resp = await client.post(f"{API}/done", headers=auth_headers)
    assert resp.status_code == 200
    assert len(get_registry()) == 0


async def test_failed_action_returns_snapshot_with_error(
    client: AsyncClient, backend: AsyncMock, auth_headers: dict[str, str]
) -> None:
    await client.post(API, headers=auth_headers)
    await client.put(f"{API}/details", json={"amount": "10"}, headers=auth_headers)

    resp = await client.post(f"{API}/continue", headers=auth_headers)

    body = resp.json()
    assert resp.status_code == 422
    assert body["code"] == 4001
    assert body["data"]["step"] == "entry"
    assert body["data"]["error"] == "Please find a valid recipient first"
    assert body["data"]["amount"] == "10"


async def test_huge_amount_reported_inline(
    client: AsyncClient, backend: AsyncMock, auth_headers: dict[str, str]
) -> None:
    await client.post(API, headers=auth_headers)
    await client.post(f"{API}/search", json={"text": "@tendai"}, headers=auth_headers)

    resp = await client.put(f"{API}/details", json={"amount": "1e30"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["amount_display"] is None

    resp = await client.post(f"{API}/continue", headers=auth_headers)
    body = resp.json()
    assert resp.status_code == 422
    assert body["code"] == 4002
    assert body["data"]["step"] == "entry"
    assert body["data"]["amount"] == "1e30"

    resp = await client.get(API, headers=auth_headers)
    assert resp.status_code == 200


async def test_long_note_reported_inline(
    client: AsyncClient, backend: AsyncMock, auth_headers: dict[str, str]
) -> None:
    await client.post(API, headers=auth_headers)

    resp = await client.put(f"{API}/details", json={"note": "x" * 600}, headers=auth_headers)

    body = resp.json()
    assert resp.status_code == 422
    assert body["code"] == 4006
    assert body["data"]["step"] == "entry"
    assert body["data"]["error"] == "Note must be 100 characters or fewer"


async def test_self_transfer_rejected(
    client: AsyncClient, backend: AsyncMock, auth_headers: dict[str, str]
) -> None:
    backend.find_profile_by_username.return_value = _make_profile("user-1", "alice")
    await client.post(API, headers=auth_headers)

    resp = await client.post(f"{API}/search", json={"text": "alice"}, headers=auth_headers)

    assert resp.json()["code"] == 3005
    assert resp.json()["data"]["recipient"] is None


async def test_confirm_out_of_step(
    client: AsyncClient, backend: AsyncMock, auth_headers: dict[str, str]
) -> None:
    await client.post(API, headers=auth_headers)
    resp = await client.post(f"{API}/confirm", headers=auth_headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == 4010


async def test_typing_marks_search_in_progress(
    client: AsyncClient, backend: AsyncMock, auth_headers: dict[str, str]
) -> None:
    await client.post(API, headers=auth_headers)
    resp = await client.put(f"{API}/recipient", json={"text": "ten"}, headers=auth_headers)
    data = resp.json()["data"]
    assert data["searching"] is True
    assert data["recipient_query"] == "ten"


async def test_close(
    client: AsyncClient, backend: AsyncMock, auth_headers: dict[str, str]
) -> None:
    await client.post(API, headers=auth_headers)
    resp = await client.delete(API, headers=auth_headers)
    assert resp.status_code == 200
    resp = await client.get(API, headers=auth_headers)
    assert resp.status_code == 404
