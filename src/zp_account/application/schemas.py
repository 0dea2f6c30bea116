"""Pydantic response schemas for zp_account API."""

from decimal import Decimal

from pydantic import BaseModel

from src.zp_backend.domain.models import Profile, Transaction
from src.zp_common.datetime_utils import format_relative
from src.zp_common.enums import TransactionDirection
from src.zp_common.money import amount_to_display
from src.zp_phone.normalizer import format_for_display


class ProfileResponse(BaseModel):
    user_id: str
    email: str
    full_name: str
    username: str
    phone_number: str
    phone_display: str
    balance: Decimal
    balance_display: str

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileResponse":
        return cls(
            user_id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            username=profile.username,
            phone_number=profile.phone_number,
            phone_display=format_for_display(profile.phone_number) if profile.phone_number else "",
            balance=profile.balance,
            balance_display=amount_to_display(profile.balance),
        )


class BalanceResponse(BaseModel):
    user_id: str
    balance: Decimal
    balance_display: str
    currency: str = "USD"


class TransactionItem(BaseModel):
    id: str
    direction: TransactionDirection
    counterparty_id: str
    counterparty_name: str
    counterparty_username: str
    amount: Decimal
    amount_display: str            # signed: '-$5.00' sent, '+$5.00' received
    description: str | None
    status: str
    created_at: str
    when: str

    @classmethod
    def from_transaction(cls, tx: Transaction, user_id: str) -> "TransactionItem":
        sent = tx.sender_id == user_id
        party = tx.receiver if sent else tx.sender
        display = amount_to_display(tx.amount)
        return cls(
            id=tx.id,
            direction=TransactionDirection.SENT if sent else TransactionDirection.RECEIVED,
            counterparty_id=tx.receiver_id if sent else tx.sender_id,
            counterparty_name=party.full_name if party else "",
            counterparty_username=party.username if party else "",
            amount=tx.amount,
            amount_display=f"-{display}" if sent else f"+{display}",
            description=tx.description,
            status=tx.status.value,
            created_at=tx.created_at.isoformat() if tx.created_at else "",
            when=format_relative(tx.created_at) if tx.created_at else "",
        )


class TransactionListResponse(BaseModel):
    items: list[TransactionItem]
