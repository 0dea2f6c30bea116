"""Domain models for zp_transfer: pure dataclasses, no I/O."""

from dataclasses import dataclass
from decimal import Decimal

from src.zp_backend.domain.models import ExternalLedgerAccount, Profile
from src.zp_common.enums import TransferStep


@dataclass
class RecipientCandidate:
    """A recipient the resolver has validated as an eligible transfer target.

    External ledger accounts are mapped into the same shape: the username
    doubles as the display name and email/phone stay empty.
    """

    id: str
    username: str
    full_name: str
    email: str
    phone_number: str
    balance: Decimal
    is_external_ledger: bool = False

    @classmethod
    def from_profile(cls, profile: Profile) -> "RecipientCandidate":
        return cls(
            id=profile.id,
            username=profile.username,
            full_name=profile.full_name,
            email=profile.email,
            phone_number=profile.phone_number,
            balance=profile.balance,
        )

    @classmethod
    def from_external(cls, account: ExternalLedgerAccount) -> "RecipientCandidate":
        return cls(
            id=account.id,
            username=account.username,
            full_name=account.username,
            email="",
            phone_number="",
            balance=account.balance,
            is_external_ledger=True,
        )


@dataclass
class WorkflowState:
    step: TransferStep = TransferStep.ENTRY
    recipient_query: str = ""
    candidate: RecipientCandidate | None = None
    amount: str = ""
    note: str = ""
    error: str | None = None
    searching: bool = False
    sent_amount: Decimal | None = None     # set on reaching SUCCESS

    @property
    def is_external_ledger(self) -> bool:
        return self.candidate is not None and self.candidate.is_external_ledger
