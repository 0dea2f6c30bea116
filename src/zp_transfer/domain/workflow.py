"""TransferWorkflow: the send-money wizard.

    ENTRY --proceed--> CONFIRM --confirm ok--> SUCCESS --done--> (closed)
      ^                  |   \
      +------back--------+    +--confirm fails--> CONFIRM (error shown)

Errors never end the workflow: the failing action records its message in
`state.error` for inline display, re-raises, and the step stays unchanged so
the user can amend input and retry. Transfer mutations are never retried.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from decimal import Decimal

from config.settings import settings
from src.zp_backend.domain.models import Profile
from src.zp_backend.domain.repository import BackendProtocol
from src.zp_common.enums import LedgerPhase, TransferStep
from src.zp_common.errors import (
    AppError,
    BackendError,
    InvalidStepError,
    RecipientRequiredError,
    TransferFailedError,
    TransferFailedRestoredError,
    TransferFailedUnrestoredError,
)
from src.zp_common.money import round_amount
from src.zp_transfer.domain.amount_rules import check_note, check_transfer
from src.zp_transfer.domain.debounce import DebouncedSearch
from src.zp_transfer.domain.external_ledger import ExternalLedgerTransfer
from src.zp_transfer.domain.models import RecipientCandidate, WorkflowState
from src.zp_transfer.domain.resolver import MIN_QUERY_LENGTH, RecipientResolver

logger = logging.getLogger(__name__)

DoneCallback = Callable[[], Awaitable[None]]


class TransferWorkflow:
    def __init__(
        self,
        backend: BackendProtocol,
        sender: Profile,
        *,
        resolver: RecipientResolver | None = None,
        debounce_seconds: float | None = None,
        on_done: DoneCallback | None = None,
    ) -> None:
        self._backend = backend
        self.sender = sender
        self._resolver = resolver or RecipientResolver(backend)
        self._on_done = on_done
        self._confirming = False
        self.closed = False
        self.state = WorkflowState()
        delay = settings.SEARCH_DEBOUNCE_MS / 1000 if debounce_seconds is None else debounce_seconds
        self._search: DebouncedSearch[RecipientCandidate] = DebouncedSearch(
            self._resolve,
            on_result=self._apply_candidate,
            on_error=self._apply_search_error,
            delay=delay,
        )

    @property
    def search_task(self) -> asyncio.Task[None] | None:
        """Pending debounced search, exposed so callers can await it."""
        return self._search.pending

    # ------------------------------------------------------------------
    # ENTRY
    # ------------------------------------------------------------------

    def update_recipient_query(self, text: str) -> None:
        """Record typed text and schedule a debounced auto-search."""
        self._require(TransferStep.ENTRY, "change the recipient")
        self.state.recipient_query = text
        self.state.candidate = None
        self.state.error = None
        if len(text.strip()) >= MIN_QUERY_LENGTH:
            self.state.searching = True
            self._search.schedule(text)
        else:
            self.state.searching = False
            self._search.cancel()

    async def search(self, text: str | None = None) -> RecipientCandidate | None:
        """Explicit search; supersedes any scheduled auto-search."""
        self._require(TransferStep.ENTRY, "search")
        if text is not None:
            self.state.recipient_query = text
        self.state.candidate = None
        self.state.error = None
        self.state.searching = True
        return await self._search.run_now(self.state.recipient_query)

    def update_details(self, amount: str | None = None, note: str | None = None) -> None:
        self._require(TransferStep.ENTRY, "edit the transfer")
        if amount is not None:
            self.state.amount = amount.strip()
        if note is not None:
            with self._recording_errors():
                self.state.note = check_note(note)

    def proceed(self) -> Decimal:
        """ENTRY -> CONFIRM once recipient and amount pass every check."""
        self._require(TransferStep.ENTRY, "continue")
        with self._recording_errors():
            amount = check_transfer(
                self.state.candidate, self.state.amount, self.sender.balance
            )
        self._search.cancel()
        self.state.searching = False
        self.state.error = None
        self.state.step = TransferStep.CONFIRM
        return amount

    # ------------------------------------------------------------------
    # CONFIRM
    # ------------------------------------------------------------------

    def back(self) -> None:
        self._require(TransferStep.CONFIRM, "go back")
        if self._confirming:
            raise InvalidStepError("go back", "confirm (transfer in progress)")
        self.state.error = None
        self.state.step = TransferStep.ENTRY

    async def confirm(self) -> Decimal:
        """Move the money. Returns the amount sent (rounded to cents)."""
        self._require(TransferStep.CONFIRM, "confirm")
        if self._confirming:
            raise InvalidStepError("confirm", "confirm (transfer in progress)")
        candidate = self.state.candidate
        if candidate is None:
            raise RecipientRequiredError()

        self._confirming = True
        self.state.error = None
        try:
            with self._recording_errors():
                amount = round_amount(
                    check_transfer(candidate, self.state.amount, self.sender.balance)
                )
                if candidate.is_external_ledger:
                    await self._send_external(candidate, amount)
                else:
                    await self._send_same_system(candidate, amount)
        finally:
            self._confirming = False

        logger.info(
            "Transfer of %s from %s to %s completed (external=%s)",
            amount, self.sender.id, candidate.username, candidate.is_external_ledger,
        )
        self.state.sent_amount = amount
        self.state.step = TransferStep.SUCCESS
        return amount

    async def _send_same_system(self, candidate: RecipientCandidate, amount: Decimal) -> None:
        try:
            result = await self._backend.transfer_money(
                self.sender.id, candidate.username, amount, self.state.note or None
            )
        except BackendError as exc:
            raise TransferFailedError(exc.message) from exc
        if not result.success:
            raise TransferFailedError(result.error or "Transfer failed")

    async def _send_external(self, candidate: RecipientCandidate, amount: Decimal) -> None:
        outcome = await ExternalLedgerTransfer(
            self._backend, self.sender.id, candidate, amount, self.state.note or None
        ).run()
        if outcome.phase is LedgerPhase.DEBIT_FAILED:
            raise TransferFailedError(outcome.error or "Transfer failed")
        if outcome.phase is LedgerPhase.RESTORED:
            raise TransferFailedRestoredError()
        if outcome.phase is LedgerPhase.UNRESTORED:
            raise TransferFailedUnrestoredError()
        if outcome.record is None:
            logger.warning(
                "External transfer to %s succeeded but was not recorded: %s",
                candidate.username, outcome.error,
            )

    # ------------------------------------------------------------------
    # SUCCESS
    # ------------------------------------------------------------------

    async def done(self) -> None:
        """Notify the caller (balance/history refresh) and close."""
        self._require(TransferStep.SUCCESS, "finish")
        if self._on_done is not None:
            await self._on_done()
        self.close()

    def close(self) -> None:
        self._search.cancel()
        self.closed = True

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    async def _resolve(self, query: str) -> RecipientCandidate:
        return await self._resolver.resolve(query, self.sender.id)

    def _apply_candidate(self, candidate: RecipientCandidate) -> None:
        self.state.candidate = candidate
        self.state.error = None
        self.state.searching = False

    def _apply_search_error(self, exc: AppError) -> None:
        self.state.candidate = None
        self.state.error = exc.message
        self.state.searching = False

    def _require(self, step: TransferStep, action: str) -> None:
        if self.closed:
            raise InvalidStepError(action, "closed")
        if self.state.step is not step:
            raise InvalidStepError(action, self.state.step.value)

    @contextmanager
    def _recording_errors(self) -> Iterator[None]:
        """Copy an AppError's message into state.error, then re-raise."""
        try:
            yield
        except AppError as exc:
            self.state.error = exc.message
            raise
