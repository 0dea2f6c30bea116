"""Domain models for zp_backend — pure dataclasses, no HTTP dependency.

Rows owned by the hosted backend. The client only ever holds copies: the
signed-in user's cached profile and transient copies of resolved recipients.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.zp_common.enums import TransactionStatus


@dataclass
class Profile:
    id: str
    email: str
    full_name: str
    username: str
    phone_number: str        # any of the legacy formats, see zp_phone
    balance: Decimal         # dollars, 2 decimal places
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ExternalLedgerAccount:
    """Account in the external ledger; only reachable by direct balance updates."""

    id: str
    username: str            # always carries the external ledger prefix
    balance: Decimal
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class PartySummary:
    """Joined sender/receiver columns on a transaction row."""

    id: str
    full_name: str
    username: str


@dataclass
class Transaction:
    id: str
    sender_id: str
    receiver_id: str
    amount: Decimal
    description: str | None
    status: TransactionStatus
    created_at: datetime | None = None
    sender: PartySummary | None = None
    receiver: PartySummary | None = None


@dataclass
class NewTransaction:
    sender_id: str
    receiver_id: str
    amount: Decimal
    description: str | None = None
    status: TransactionStatus = TransactionStatus.COMPLETED


@dataclass
class TransferResult:
    """Return value of the transfer_money stored procedure."""

    success: bool
    error: str | None = None


@dataclass
class AuthUser:
    id: str
    email: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class AuthSession:
    access_token: str
    refresh_token: str
    expires_in: int
    user: AuthUser
