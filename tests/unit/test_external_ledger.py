"""Tests for the client-orchestrated external ledger transfer."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.zp_backend.domain.models import ExternalLedgerAccount, NewTransaction, Profile
from src.zp_common.enums import LedgerPhase, TransactionStatus
from src.zp_common.errors import BackendError
from src.zp_transfer.domain.external_ledger import (
    TERMINAL_PHASES,
    ExternalLedgerTransfer,
    next_phase,
)
from src.zp_transfer.domain.models import RecipientCandidate

SENDER = "user-1"


def _make_sender(balance: str = "50.00") -> Profile:
    return Profile(
        id=SENDER,
        email="alice@example.com",
        full_name="Alice",
        username="alice",
        phone_number="+263773049503",
        balance=Decimal(balance),
    )


def _make_account(balance: str = "5.00") -> ExternalLedgerAccount:
    return ExternalLedgerAccount(id="ext-1", username="zm-bob", balance=Decimal(balance))


def _candidate() -> RecipientCandidate:
    return RecipientCandidate.from_external(_make_account())


def _make_backend(sender_balance: str = "50.00") -> AsyncMock:
    backend = AsyncMock()
    backend.get_profile.return_value = _make_sender(sender_balance)
    backend.find_external_account.return_value = _make_account()
    return backend


class TestTransitions:
    def test_happy_path(self) -> None:
        phase = LedgerPhase.PENDING
        for _ in range(3):
            phase = next_phase(phase, True)
        assert phase is LedgerPhase.COMPLETED

    def test_debit_failure(self) -> None:
        assert next_phase(LedgerPhase.PENDING, False) is LedgerPhase.DEBIT_FAILED

    def test_credit_failure_compensates(self) -> None:
        assert next_phase(LedgerPhase.DEBITED, False) is LedgerPhase.COMPENSATING
        assert next_phase(LedgerPhase.COMPENSATING, True) is LedgerPhase.RESTORED
        assert next_phase(LedgerPhase.COMPENSATING, False) is LedgerPhase.UNRESTORED

    def test_record_failure_still_completes(self) -> None:
        assert next_phase(LedgerPhase.CREDITED, False) is LedgerPhase.COMPLETED

    @pytest.mark.parametrize("phase", sorted(TERMINAL_PHASES, key=lambda p: p.value))
    def test_terminal_phases_have_no_successor(self, phase: LedgerPhase) -> None:
        with pytest.raises(ValueError, match="terminal"):
            next_phase(phase, True)


class TestRun:
    async def test_success_moves_both_balances_and_records(self) -> None:
        backend = _make_backend()

        outcome = await ExternalLedgerTransfer(
            backend, SENDER, _candidate(), Decimal("20")
        ).run()

        assert outcome.succeeded
        assert outcome.phase is LedgerPhase.COMPLETED
        assert outcome.amount == Decimal("20.00")
        backend.update_profile_balance.assert_awaited_once_with(SENDER, Decimal("30.00"))
        backend.update_external_balance.assert_awaited_once_with("ext-1", Decimal("25.00"))
        record: NewTransaction = backend.insert_transaction.await_args.args[0]
        assert record.sender_id == SENDER
        assert record.receiver_id == "ext-1"
        assert record.amount == Decimal("20.00")
        assert record.status is TransactionStatus.COMPLETED
        assert record.description == "Transfer to zm-bob"

    async def test_note_used_as_description(self) -> None:
        backend = _make_backend()
        await ExternalLedgerTransfer(
            backend, SENDER, _candidate(), Decimal("1"), "rent"
        ).run()
        assert backend.insert_transaction.await_args.args[0].description == "rent"

    async def test_debit_failure_touches_nothing_else(self) -> None:
        backend = _make_backend()
        backend.update_profile_balance.side_effect = BackendError("write refused")

        outcome = await ExternalLedgerTransfer(
            backend, SENDER, _candidate(), Decimal("20")
        ).run()

        assert outcome.phase is LedgerPhase.DEBIT_FAILED
        assert outcome.error == "write refused"
        backend.update_external_balance.assert_not_awaited()
        backend.insert_transaction.assert_not_awaited()

    async def test_insufficient_fresh_balance_fails_debit(self) -> None:
        backend = _make_backend(sender_balance="10.00")

        outcome = await ExternalLedgerTransfer(
            backend, SENDER, _candidate(), Decimal("20")
        ).run()

        assert outcome.phase is LedgerPhase.DEBIT_FAILED
        assert "Insufficient balance" in (outcome.error or "")
        backend.update_profile_balance.assert_not_awaited()

    async def test_credit_failure_restores_pre_debit_balance(self) -> None:
        backend = _make_backend(sender_balance="50.00")
        backend.update_external_balance.side_effect = BackendError("ledger down")

        outcome = await ExternalLedgerTransfer(
            backend, SENDER, _candidate(), Decimal("20")
        ).run()

        assert outcome.phase is LedgerPhase.RESTORED
        assert outcome.error == "ledger down"
        calls = [c.args for c in backend.update_profile_balance.await_args_list]
        assert calls == [(SENDER, Decimal("30.00")), (SENDER, Decimal("50.00"))]
        backend.insert_transaction.assert_not_awaited()

    async def test_external_account_vanished_compensates(self) -> None:
        backend = _make_backend()
        backend.find_external_account.return_value = None

        outcome = await ExternalLedgerTransfer(
            backend, SENDER, _candidate(), Decimal("20")
        ).run()

        assert outcome.phase is LedgerPhase.RESTORED

    async def test_restore_failure_is_unrestored(self) -> None:
        backend = _make_backend()
        backend.update_external_balance.side_effect = BackendError("ledger down")
        backend.update_profile_balance.side_effect = [None, BackendError("still down")]

        outcome = await ExternalLedgerTransfer(
            backend, SENDER, _candidate(), Decimal("20")
        ).run()

        assert outcome.phase is LedgerPhase.UNRESTORED
        assert not outcome.succeeded
        assert outcome.error == "ledger down"

    async def test_record_failure_still_completed(self) -> None:
        backend = _make_backend()
        backend.insert_transaction.side_effect = BackendError("insert failed")

        outcome = await ExternalLedgerTransfer(
            backend, SENDER, _candidate(), Decimal("20")
        ).run()

        assert outcome.succeeded
        assert outcome.record is None
        assert outcome.error == "insert failed"

    async def test_unexpected_exception_is_contained(self) -> None:
        backend = _make_backend()
        backend.update_external_balance.side_effect = RuntimeError("socket closed")

        outcome = await ExternalLedgerTransfer(
            backend, SENDER, _candidate(), Decimal("20")
        ).run()

        assert outcome.phase is LedgerPhase.RESTORED
        assert outcome.error == "socket closed"


def test_rejects_same_system_recipient() -> None:
    candidate = RecipientCandidate.from_profile(_make_sender())
    with pytest.raises(ValueError, match="external ledger"):
        ExternalLedgerTransfer(AsyncMock(), SENDER, candidate, Decimal("1"))
