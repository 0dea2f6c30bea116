"""Pydantic schemas for the send-money API."""

from pydantic import BaseModel, Field

from src.zp_common.money import amount_to_display, to_amount
from src.zp_phone.normalizer import format_for_display
from src.zp_transfer.domain.models import RecipientCandidate
from src.zp_transfer.domain.workflow import TransferWorkflow

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class RecipientQueryRequest(BaseModel):
    text: str = Field(..., max_length=254)


class SearchRequest(BaseModel):
    text: str | None = Field(None, max_length=254)


class DetailsRequest(BaseModel):
    amount: str | None = Field(None, max_length=32, description="Dollar amount, e.g. '25.50'")
    note: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RecipientView(BaseModel):
    user_id: str
    username: str
    full_name: str
    phone_display: str
    is_external_ledger: bool

    @classmethod
    def from_candidate(cls, candidate: RecipientCandidate) -> "RecipientView":
        # Recipient balances are never shown to the sender
        return cls(
            user_id=candidate.id,
            username=candidate.username,
            full_name=candidate.full_name,
            phone_display=(
                format_for_display(candidate.phone_number) if candidate.phone_number else ""
            ),
            is_external_ledger=candidate.is_external_ledger,
        )


class TransferStateResponse(BaseModel):
    step: str
    recipient_query: str
    recipient: RecipientView | None
    is_external_ledger: bool
    amount: str
    amount_display: str | None
    note: str
    error: str | None
    searching: bool
    available_balance_display: str
    sent_amount_display: str | None

    @classmethod
    def from_workflow(cls, workflow: TransferWorkflow) -> "TransferStateResponse":
        state = workflow.state
        try:
            amount_display: str | None = amount_to_display(to_amount(state.amount))
        except (ValueError, ArithmeticError):
            amount_display = None
        return cls(
            step=state.step.value,
            recipient_query=state.recipient_query,
            recipient=RecipientView.from_candidate(state.candidate) if state.candidate else None,
            is_external_ledger=state.is_external_ledger,
            amount=state.amount,
            amount_display=amount_display,
            note=state.note,
            error=state.error,
            searching=state.searching,
            available_balance_display=amount_to_display(workflow.sender.balance),
            sent_amount_display=(
                amount_to_display(state.sent_amount) if state.sent_amount is not None else None
            ),
        )
