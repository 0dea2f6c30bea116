"""Decimal arithmetic utilities for dollar amounts.

Balances come back from the backend as NUMERIC(12,2); they are held as
Decimal end to end and rounded half-up to cents at every mutation point.
Never use float for arithmetic here.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
# Largest order of magnitude that still quantizes to cents in a 28-digit context
MAX_ADJUSTED_EXPONENT = 25


def to_amount(value: object) -> Decimal:
    """Parse user or backend input into a finite Decimal.

    Raises ValueError for anything that is not a finite number, or is too
    large to round to cents.
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, float):
        # str() first so 0.1 becomes Decimal("0.1"), not its binary expansion
        amount = Decimal(str(value))
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    if amount.adjusted() > MAX_ADJUSTED_EXPONENT:
        raise ValueError(f"Out of range: {value!r}")
    return amount


def round_amount(amount: Decimal) -> Decimal:
    """Round to cents, half-up: Decimal('10.005') -> Decimal('10.01')."""
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Cannot round to cents: {amount!r}") from None


def decimal_places(amount: Decimal) -> int:
    """Significant decimal places: '1.50' -> 1, '1.505' -> 3, '100' -> 0."""
    exponent = amount.normalize().as_tuple().exponent
    if not isinstance(exponent, int) or exponent >= 0:
        return 0
    return -exponent


def amount_to_display(amount: Decimal) -> str:
    """Convert an amount to a USD display string: 1000 -> '$1,000.00', -12 -> '-$12.00'."""
    rounded = round_amount(amount)
    if rounded < 0:
        return f"-${-rounded:,.2f}"
    return f"${rounded:,.2f}"
