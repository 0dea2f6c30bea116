"""Pydantic row models: validate backend JSON at the boundary.

PostgREST returns plain JSON objects; nothing downstream trusts their shape.
Each row model parses one payload and converts it to the domain dataclass.
Balances arrive as JSON numbers or numeric strings and are coerced to Decimal.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from src.zp_backend.domain.models import (
    AuthSession,
    AuthUser,
    ExternalLedgerAccount,
    PartySummary,
    Profile,
    Transaction,
    TransferResult,
)
from src.zp_common.enums import TransactionStatus
from src.zp_common.errors import BackendError
from src.zp_common.money import to_amount


class _Row(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ProfileRow(_Row):
    id: str
    email: str = ""
    full_name: str = ""
    username: str
    phone_number: str | None = None
    balance: Decimal
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("balance", mode="before")
    @classmethod
    def _coerce_balance(cls, v: Any) -> Decimal:
        return to_amount(v)

    def to_domain(self) -> Profile:
        return Profile(
            id=self.id,
            email=self.email,
            full_name=self.full_name,
            username=self.username,
            phone_number=self.phone_number or "",
            balance=self.balance,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class ExternalAccountRow(_Row):
    id: str
    username: str
    balance: Decimal
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("balance", mode="before")
    @classmethod
    def _coerce_balance(cls, v: Any) -> Decimal:
        return to_amount(v)

    def to_domain(self) -> ExternalLedgerAccount:
        return ExternalLedgerAccount(
            id=self.id,
            username=self.username,
            balance=self.balance,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class PartyRow(_Row):
    id: str
    full_name: str = ""
    username: str = ""


class TransactionRow(_Row):
    id: str
    sender_id: str
    receiver_id: str
    amount: Decimal
    description: str | None = None
    status: TransactionStatus
    created_at: datetime | None = None
    sender: PartyRow | None = None
    receiver: PartyRow | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, v: Any) -> Decimal:
        return to_amount(v)

    def to_domain(self) -> Transaction:
        return Transaction(
            id=self.id,
            sender_id=self.sender_id,
            receiver_id=self.receiver_id,
            amount=self.amount,
            description=self.description,
            status=self.status,
            created_at=self.created_at,
            sender=PartySummary(**self.sender.model_dump()) if self.sender else None,
            receiver=PartySummary(**self.receiver.model_dump()) if self.receiver else None,
        )


class TransferResultRow(_Row):
    success: bool
    error: str | None = None

    def to_domain(self) -> TransferResult:
        return TransferResult(success=self.success, error=self.error)


class AuthUserRow(_Row):
    id: str
    email: str = ""
    user_metadata: dict[str, Any] = {}

    def to_domain(self) -> AuthUser:
        metadata = {k: str(v) for k, v in self.user_metadata.items() if v is not None}
        return AuthUser(id=self.id, email=self.email, metadata=metadata)


class AuthSessionRow(_Row):
    access_token: str
    refresh_token: str
    expires_in: int
    user: AuthUserRow

    def to_domain(self) -> AuthSession:
        return AuthSession(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_in=self.expires_in,
            user=self.user.to_domain(),
        )


RowT = TypeVar("RowT", bound=_Row)


def parse_row(model: type[RowT], payload: Any) -> RowT:
    """Validate one JSON object, converting shape errors into BackendError."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise BackendError(
            f"Unexpected {model.__name__} payload from backend: {exc.error_count()} error(s)"
        ) from exc


def parse_rows(model: type[RowT], payload: Any) -> list[RowT]:
    if not isinstance(payload, list):
        raise BackendError(f"Expected a list of {model.__name__} from backend")
    return [parse_row(model, item) for item in payload]
