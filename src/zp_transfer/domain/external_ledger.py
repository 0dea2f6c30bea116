"""Client-orchestrated transfer to an external ledger account.

There is no shared stored procedure across the two ledgers, so the client
moves money itself in two committed steps:

    debit sender  ->  credit external account  ->  write audit record

The sequence is driven by TRANSITIONS, keyed by (phase, step succeeded):

    PENDING       --ok-->  DEBITED       --ok-->  CREDITED  --ok/fail-->  COMPLETED
       |                     |
      fail                  fail
       v                     v
    DEBIT_FAILED          COMPENSATING  --ok-->  RESTORED
                                        --fail-> UNRESTORED

A failed audit insert still ends in COMPLETED: the balances already moved and
the record is best effort. UNRESTORED needs a human to reconcile the sender's
balance and is logged at ERROR with everything needed to do so.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from decimal import Decimal

from src.zp_backend.domain.models import NewTransaction, Transaction
from src.zp_backend.domain.repository import BackendProtocol
from src.zp_common.enums import LedgerPhase, TransactionStatus
from src.zp_common.errors import (
    AppError,
    BackendError,
    InsufficientBalanceError,
    ProfileNotFoundError,
    RecipientNotFoundError,
)
from src.zp_common.money import round_amount
from src.zp_transfer.domain.models import RecipientCandidate

logger = logging.getLogger(__name__)

TRANSITIONS: dict[tuple[LedgerPhase, bool], LedgerPhase] = {
    (LedgerPhase.PENDING, True): LedgerPhase.DEBITED,
    (LedgerPhase.PENDING, False): LedgerPhase.DEBIT_FAILED,
    (LedgerPhase.DEBITED, True): LedgerPhase.CREDITED,
    (LedgerPhase.DEBITED, False): LedgerPhase.COMPENSATING,
    (LedgerPhase.COMPENSATING, True): LedgerPhase.RESTORED,
    (LedgerPhase.COMPENSATING, False): LedgerPhase.UNRESTORED,
    (LedgerPhase.CREDITED, True): LedgerPhase.COMPLETED,
    (LedgerPhase.CREDITED, False): LedgerPhase.COMPLETED,
}

TERMINAL_PHASES: frozenset[LedgerPhase] = frozenset({
    LedgerPhase.COMPLETED,
    LedgerPhase.DEBIT_FAILED,
    LedgerPhase.RESTORED,
    LedgerPhase.UNRESTORED,
})


def next_phase(phase: LedgerPhase, succeeded: bool) -> LedgerPhase:
    if phase in TERMINAL_PHASES:
        raise ValueError(f"{phase.value} is terminal")
    return TRANSITIONS[(phase, succeeded)]


@dataclass
class ExternalTransferOutcome:
    phase: LedgerPhase
    amount: Decimal
    error: str | None = None               # message of the step that failed first
    record: Transaction | None = None      # None when the audit insert failed

    @property
    def succeeded(self) -> bool:
        return self.phase is LedgerPhase.COMPLETED


class ExternalLedgerTransfer:
    """One-shot: build per transfer, call run() once."""

    def __init__(
        self,
        backend: BackendProtocol,
        sender_id: str,
        account: RecipientCandidate,
        amount: Decimal,
        description: str | None = None,
    ) -> None:
        if not account.is_external_ledger:
            raise ValueError("ExternalLedgerTransfer needs an external ledger recipient")
        self._backend = backend
        self._sender_id = sender_id
        self._account = account
        self._amount = round_amount(amount)
        self._description = description or f"Transfer to {account.username}"
        self._pre_debit_balance: Decimal | None = None
        self._error: str | None = None
        self._record: Transaction | None = None

    async def run(self) -> ExternalTransferOutcome:
        steps: dict[LedgerPhase, Callable[[], Awaitable[None]]] = {
            LedgerPhase.PENDING: self._debit,
            LedgerPhase.DEBITED: self._credit,
            LedgerPhase.COMPENSATING: self._restore,
            LedgerPhase.CREDITED: self._record_transaction,
        }
        phase = LedgerPhase.PENDING
        while phase not in TERMINAL_PHASES:
            succeeded = await self._attempt(phase, steps[phase])
            phase = next_phase(phase, succeeded)

        if phase is LedgerPhase.UNRESTORED:
            logger.error(
                "External transfer left sender %s debited by %s without credit to %s; "
                "pre-debit balance was %s",
                self._sender_id, self._amount, self._account.username, self._pre_debit_balance,
            )
        return ExternalTransferOutcome(
            phase=phase, amount=self._amount, error=self._error, record=self._record
        )

    async def _attempt(self, phase: LedgerPhase, step: Callable[[], Awaitable[None]]) -> bool:
        try:
            await step()
        except Exception as exc:
            # Every step failure has a defined next phase; nothing may escape
            # between debit and restore.
            message = exc.message if isinstance(exc, AppError) else str(exc)
            if self._error is None:
                self._error = message
            logger.warning(
                "External transfer step failed in phase %s: %s",
                phase.value, message, exc_info=not isinstance(exc, AppError),
            )
            return False
        return True

    async def _debit(self) -> None:
        sender = await self._backend.get_profile(self._sender_id)
        if sender is None:
            raise ProfileNotFoundError(self._sender_id)
        if sender.balance < self._amount:
            raise InsufficientBalanceError(self._amount, sender.balance)
        self._pre_debit_balance = sender.balance
        await self._backend.update_profile_balance(
            self._sender_id, round_amount(sender.balance - self._amount)
        )

    async def _credit(self) -> None:
        account = await self._backend.find_external_account(self._account.username)
        if account is None:
            raise RecipientNotFoundError("external", self._account.username)
        await self._backend.update_external_balance(
            account.id, round_amount(account.balance + self._amount)
        )

    async def _restore(self) -> None:
        if self._pre_debit_balance is None:
            raise BackendError("No pre-debit balance recorded")
        await self._backend.update_profile_balance(self._sender_id, self._pre_debit_balance)

    async def _record_transaction(self) -> None:
        self._record = await self._backend.insert_transaction(
            NewTransaction(
                sender_id=self._sender_id,
                receiver_id=self._account.id,
                amount=self._amount,
                description=self._description,
                status=TransactionStatus.COMPLETED,
            )
        )
