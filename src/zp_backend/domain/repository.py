"""Backend Protocols — dependency inversion for testability.

Unit tests inject an AsyncMock that conforms to these Protocols.
Infrastructure layer provides the real (Supabase) implementation.

Every method raises BackendError when the backend reports a failure; "no
such row" is a normal result (None / empty list), never an error.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Protocol

from src.zp_backend.domain.models import (
    AuthSession,
    AuthUser,
    ExternalLedgerAccount,
    NewTransaction,
    Profile,
    Transaction,
    TransferResult,
)


class BackendProtocol(Protocol):
    # --- profiles ---

    async def get_profile(self, user_id: str) -> Profile | None: ...

    async def insert_profile(self, profile: Profile) -> Profile: ...

    async def find_profile_by_email(self, email: str) -> Profile | None: ...

    async def find_profile_by_username(self, username: str) -> Profile | None: ...

    async def find_profile_by_phone(self, formats: Iterable[str]) -> Profile | None: ...

    async def search_profiles_by_username(
        self, fragment: str, limit: int
    ) -> list[Profile]: ...

    async def update_profile_balance(self, user_id: str, balance: Decimal) -> None: ...

    # --- external ledger ---

    async def find_external_account(self, username: str) -> ExternalLedgerAccount | None: ...

    async def update_external_balance(self, account_id: str, balance: Decimal) -> None: ...

    # --- transactions ---

    async def insert_transaction(self, record: NewTransaction) -> Transaction: ...

    async def list_transactions(self, user_id: str, limit: int) -> list[Transaction]: ...

    async def transfer_money(
        self,
        sender_id: str,
        receiver_username: str,
        amount: Decimal,
        description: str | None,
    ) -> TransferResult: ...


class AuthBackendProtocol(Protocol):
    async def sign_up(
        self, email: str, password: str, metadata: dict[str, str]
    ) -> AuthUser: ...

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession: ...

    async def sign_out(self, access_token: str) -> None: ...
