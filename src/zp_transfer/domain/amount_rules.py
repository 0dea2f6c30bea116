"""Pre-confirmation checks for the send-money form.

Each check raises the AppError the form shows inline. Order matters: the
first failing rule wins, mirroring how the form reports one problem at a time.
"""

from decimal import Decimal

from config.settings import settings
from src.zp_common.errors import (
    BelowMinimumError,
    InsufficientBalanceError,
    InvalidAmountError,
    NoteTooLongError,
    RecipientRequiredError,
    TooManyDecimalsError,
)
from src.zp_common.money import decimal_places, to_amount
from src.zp_transfer.domain.models import RecipientCandidate

MAX_DECIMAL_PLACES = 2


def parse_amount(text: str) -> Decimal:
    """Raise InvalidAmountError unless `text` is a positive finite number."""
    try:
        amount = to_amount(text)
    except ValueError:
        raise InvalidAmountError() from None
    if amount <= 0:
        raise InvalidAmountError()
    return amount


def check_transfer(
    candidate: RecipientCandidate | None,
    amount_text: str,
    balance: Decimal,
    minimum: Decimal | None = None,
) -> Decimal:
    """Validate the entry step and return the parsed amount."""
    if candidate is None:
        raise RecipientRequiredError()
    minimum = settings.MIN_TRANSFER_AMOUNT if minimum is None else minimum

    amount = parse_amount(amount_text)
    if amount > balance:
        raise InsufficientBalanceError(amount, balance)
    if amount < minimum:
        raise BelowMinimumError(minimum)
    if decimal_places(amount) > MAX_DECIMAL_PLACES:
        raise TooManyDecimalsError()
    return amount


def check_note(note: str, max_length: int | None = None) -> str:
    max_length = max_length or settings.MAX_NOTE_LENGTH
    note = note.strip()
    if len(note) > max_length:
        raise NoteTooLongError(max_length)
    return note
