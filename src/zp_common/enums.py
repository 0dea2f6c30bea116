"""Global enums: values must match the backend's CHECK constraints exactly."""

from enum import Enum


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class TransactionDirection(str, Enum):
    """Direction of a transaction relative to the signed-in user."""
    SENT = "sent"
    RECEIVED = "received"


class SearchMethod(str, Enum):
    """How a recipient query was classified, and which collection it hits."""
    EMAIL = "email"
    PHONE = "phone"
    USERNAME = "username"
    EXTERNAL = "external"


class TransferStep(str, Enum):
    ENTRY = "entry"
    CONFIRM = "confirm"
    SUCCESS = "success"


class LedgerPhase(str, Enum):
    """Phases of the client-orchestrated external ledger transfer."""
    PENDING = "pending"
    DEBITED = "debited"
    CREDITED = "credited"
    COMPENSATING = "compensating"
    # Terminal
    COMPLETED = "completed"
    DEBIT_FAILED = "debit_failed"
    RESTORED = "restored"
    UNRESTORED = "unrestored"
