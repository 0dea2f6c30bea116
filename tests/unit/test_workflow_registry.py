"""Tests for the per-user workflow registry."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.zp_backend.domain.models import Profile
from src.zp_common.errors import NoActiveTransferError
from src.zp_transfer.application.registry import WorkflowRegistry
from src.zp_transfer.domain.workflow import TransferWorkflow


def _workflow() -> TransferWorkflow:
    sender = Profile(
        id="user-1",
        email="alice@example.com",
        full_name="Alice",
        username="alice",
        phone_number="",
        balance=Decimal("10"),
    )
    return TransferWorkflow(AsyncMock(), sender, debounce_seconds=0)


def test_get_without_open() -> None:
    with pytest.raises(NoActiveTransferError):
        WorkflowRegistry().get("user-1")


def test_open_replaces_and_closes_previous() -> None:
    registry = WorkflowRegistry()
    first = registry.open("user-1", _workflow())
    second = registry.open("user-1", _workflow())

    assert first.closed
    assert registry.get("user-1") is second
    assert len(registry) == 1


def test_closed_workflow_is_evicted() -> None:
    registry = WorkflowRegistry()
    registry.open("user-1", _workflow()).close()

    with pytest.raises(NoActiveTransferError):
        registry.get("user-1")
    assert len(registry) == 0


def test_close_all() -> None:
    registry = WorkflowRegistry()
    a = registry.open("user-1", _workflow())
    b = registry.open("user-2", _workflow())

    registry.close_all()

    assert a.closed and b.closed
    assert len(registry) == 0
