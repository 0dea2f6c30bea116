"""SupabaseBackend — concrete implementation of BackendProtocol and AuthBackendProtocol.

Talks to the hosted backend over HTTP:
  - PostgREST  (/rest/v1)  table reads/updates/inserts and the transfer_money RPC
  - GoTrue     (/auth/v1)  signup, password sign-in, sign-out

Row-level security is enforced by the backend against the caller's access
token, so every per-user operation must go through `for_user(token)`. The
httpx.AsyncClient is shared: one connection pool per process.

Usage:
    backend = SupabaseBackend.from_settings()
    user_backend = backend.for_user(access_token)
    profile = await user_backend.get_profile(user_id)
    ...
    await backend.close()
"""

import logging
from collections.abc import Iterable
from decimal import Decimal
from typing import Any

import httpx

from config.settings import settings
from src.zp_backend.domain.models import (
    AuthSession,
    AuthUser,
    ExternalLedgerAccount,
    NewTransaction,
    Profile,
    Transaction,
    TransferResult,
)
from src.zp_backend.infrastructure.rows import (
    AuthSessionRow,
    AuthUserRow,
    ExternalAccountRow,
    ProfileRow,
    TransactionRow,
    TransferResultRow,
    parse_row,
    parse_rows,
)
from src.zp_common.errors import (
    BackendError,
    InvalidCredentialsError,
    SignUpRejectedError,
)
from src.zp_common.money import round_amount

logger = logging.getLogger(__name__)

_PROFILES = "profiles"
_TRANSACTIONS = "transactions"

# Joined party columns for history display (FK names from the backend schema)
_TRANSACTION_SELECT = (
    "*,"
    "sender:profiles!transactions_sender_id_fkey(id,full_name,username),"
    "receiver:profiles!transactions_receiver_id_fkey(id,full_name,username)"
)

_RETURN_ROWS = {"Prefer": "return=representation"}


def _amount_json(amount: Decimal) -> float:
    """NUMERIC columns accept JSON numbers; round first so no binary drift leaks in."""
    return float(round_amount(amount))


def _ilike_contains(fragment: str) -> str:
    """Substring ILIKE filter with LIKE metacharacters matched literally."""
    escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"ilike.*{escaped}*"


def _in_filter(values: Iterable[str]) -> str:
    quoted = ",".join('"' + v.replace('"', "") + '"' for v in sorted(set(values)))
    return f"in.({quoted})"


def _error_detail(response: httpx.Response) -> str:
    """Pull a readable message out of a PostgREST or GoTrue error body."""
    try:
        body = response.json()
    except ValueError:
        return f"Backend returned HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return f"Backend returned HTTP {response.status_code}"


class SupabaseBackend:
    def __init__(
        self,
        base_url: str,
        anon_key: str,
        access_token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._anon_key = anon_key
        self._access_token = access_token
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
        )
        self.external_table = settings.EXTERNAL_LEDGER_TABLE

    @classmethod
    def from_settings(cls) -> "SupabaseBackend":
        return cls(
            settings.SUPABASE_URL,
            settings.SUPABASE_ANON_KEY,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )

    def for_user(self, access_token: str) -> "SupabaseBackend":
        """Same connection pool, requests authorized as the given user."""
        return SupabaseBackend(
            self.base_url, self._anon_key, access_token=access_token, client=self._client
        )

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {self._access_token or self._anon_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method, path, params=params, json=json, headers=self._headers(headers)
            )
        except httpx.TimeoutException:
            raise BackendError(f"Backend request timed out: {method} {path}") from None
        except httpx.HTTPError as e:
            raise BackendError(f"Cannot reach backend at {self.base_url}: {e}") from e
        logger.debug("%s %s -> %d", method, path, response.status_code)
        return response

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._send(method, path, **kwargs)
        if response.is_error:
            raise BackendError(_error_detail(response))
        if not response.content:
            return None
        return response.json()

    async def _select(self, table: str, params: list[tuple[str, str]]) -> Any:
        return await self._request("GET", f"/rest/v1/{table}", params=params)

    async def _first(self, model: type[Any], table: str, params: list[tuple[str, str]]) -> Any:
        rows = parse_rows(model, await self._select(table, [*params, ("limit", "1")]))
        return rows[0].to_domain() if rows else None

    async def _update(self, table: str, row_id: str, values: dict[str, Any]) -> None:
        payload = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=[("id", f"eq.{row_id}")],
            json=values,
            headers=_RETURN_ROWS,
        )
        # RLS hides rows instead of failing: zero rows back means nothing was written
        if not payload:
            raise BackendError(f"No {table} row updated for id {row_id}")

    # ------------------------------------------------------------------
    # profiles
    # ------------------------------------------------------------------

    async def get_profile(self, user_id: str) -> Profile | None:
        return await self._first(ProfileRow, _PROFILES, [("select", "*"), ("id", f"eq.{user_id}")])

    async def insert_profile(self, profile: Profile) -> Profile:
        payload = await self._request(
            "POST",
            f"/rest/v1/{_PROFILES}",
            json={
                "id": profile.id,
                "email": profile.email,
                "full_name": profile.full_name,
                "username": profile.username,
                "phone_number": profile.phone_number,
                "balance": _amount_json(profile.balance),
            },
            headers=_RETURN_ROWS,
        )
        rows = parse_rows(ProfileRow, payload)
        if not rows:
            raise BackendError("Profile insert returned no row")
        return rows[0].to_domain()

    async def find_profile_by_email(self, email: str) -> Profile | None:
        return await self._first(ProfileRow, _PROFILES, [("select", "*"), ("email", f"eq.{email}")])

    async def find_profile_by_username(self, username: str) -> Profile | None:
        return await self._first(
            ProfileRow, _PROFILES, [("select", "*"), ("username", f"eq.{username}")]
        )

    async def find_profile_by_phone(self, formats: Iterable[str]) -> Profile | None:
        return await self._first(
            ProfileRow, _PROFILES, [("select", "*"), ("phone_number", _in_filter(formats))]
        )

    async def search_profiles_by_username(self, fragment: str, limit: int) -> list[Profile]:
        payload = await self._select(
            _PROFILES,
            [("select", "*"), ("username", _ilike_contains(fragment)), ("limit", str(limit))],
        )
        return [row.to_domain() for row in parse_rows(ProfileRow, payload)]

    async def update_profile_balance(self, user_id: str, balance: Decimal) -> None:
        await self._update(_PROFILES, user_id, {"balance": _amount_json(balance)})

    # ------------------------------------------------------------------
    # external ledger
    # ------------------------------------------------------------------

    async def find_external_account(self, username: str) -> ExternalLedgerAccount | None:
        return await self._first(
            ExternalAccountRow,
            self.external_table,
            [("select", "*"), ("username", f"eq.{username}")],
        )

    async def update_external_balance(self, account_id: str, balance: Decimal) -> None:
        await self._update(self.external_table, account_id, {"balance": _amount_json(balance)})

    # ------------------------------------------------------------------
    # transactions
    # ------------------------------------------------------------------

    async def insert_transaction(self, record: NewTransaction) -> Transaction:
        payload = await self._request(
            "POST",
            f"/rest/v1/{_TRANSACTIONS}",
            json={
                "sender_id": record.sender_id,
                "receiver_id": record.receiver_id,
                "amount": _amount_json(record.amount),
                "description": record.description,
                "status": record.status.value,
            },
            headers=_RETURN_ROWS,
        )
        rows = parse_rows(TransactionRow, payload)
        if not rows:
            raise BackendError("Transaction insert returned no row")
        return rows[0].to_domain()

    async def list_transactions(self, user_id: str, limit: int) -> list[Transaction]:
        payload = await self._select(
            _TRANSACTIONS,
            [
                ("select", _TRANSACTION_SELECT),
                ("or", f"(sender_id.eq.{user_id},receiver_id.eq.{user_id})"),
                ("order", "created_at.desc"),
                ("limit", str(limit)),
            ],
        )
        return [row.to_domain() for row in parse_rows(TransactionRow, payload)]

    async def transfer_money(
        self,
        sender_id: str,
        receiver_username: str,
        amount: Decimal,
        description: str | None,
    ) -> TransferResult:
        payload = await self._request(
            "POST",
            "/rest/v1/rpc/transfer_money",
            json={
                "p_sender_id": sender_id,
                "p_receiver_identifier": receiver_username,
                "p_amount": _amount_json(amount),
                "p_description": description,
            },
        )
        return parse_row(TransferResultRow, payload).to_domain()

    # ------------------------------------------------------------------
    # auth
    # ------------------------------------------------------------------

    async def sign_up(self, email: str, password: str, metadata: dict[str, str]) -> AuthUser:
        response = await self._send(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password, "data": metadata},
        )
        if 400 <= response.status_code < 500:
            raise SignUpRejectedError(_error_detail(response))
        if response.is_error:
            raise BackendError(_error_detail(response))
        body = response.json()
        # With email confirmation on, GoTrue returns the bare user instead of a session
        return parse_row(AuthUserRow, body.get("user", body)).to_domain()

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        response = await self._send(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if response.status_code in (400, 401):
            raise InvalidCredentialsError()
        if response.is_error:
            raise BackendError(_error_detail(response))
        return parse_row(AuthSessionRow, response.json()).to_domain()

    async def sign_out(self, access_token: str) -> None:
        await self._request(
            "POST",
            "/auth/v1/logout",
            headers={"Authorization": f"Bearer {access_token}"},
        )
