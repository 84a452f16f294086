"""Fixed-point money helpers.

Amounts travel through the API as Decimal with two places ("100.00") and
are stored as integer cents, so arithmetic in the database is exact and
repeated recharge/deduct cycles never drift.
"""

from decimal import Decimal, InvalidOperation

from codeshare.exceptions import InvalidAmountError

CENT = Decimal("0.01")

# Largest single recharge/deduct accepted
MAX_AMOUNT = Decimal("99999999999.99")


def to_cents(amount) -> int:
    """Convert a positive amount with at most two decimal places to cents.

    Accepts Decimal, int or str. Floats are rejected because they cannot
    represent most cent values exactly.

    Raises:
        InvalidAmountError: If the amount is unparsable, non-finite,
            non-positive or has more than two decimal places.
    """
    if isinstance(amount, (bool, float)) or amount is None:
        raise InvalidAmountError(amount, "must be a decimal number")
    try:
        value = Decimal(amount) if not isinstance(amount, Decimal) else amount
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(amount, "must be a decimal number")

    if not value.is_finite():
        raise InvalidAmountError(amount, "must be a finite number")
    if value <= 0:
        raise InvalidAmountError(amount, "must be greater than 0")
    if value > MAX_AMOUNT:
        raise InvalidAmountError(amount, f"must not exceed {MAX_AMOUNT}")
    try:
        quantized = value.quantize(CENT)
    except InvalidOperation:
        raise InvalidAmountError(amount, "is too large")
    if value != quantized:
        raise InvalidAmountError(amount, "at most two decimal places are allowed")

    return int(quantized * 100)


def from_cents(cents: int) -> Decimal:
    """Convert integer cents to a two-place Decimal: 7000 -> Decimal('70.00')."""
    return (Decimal(cents) / 100).quantize(CENT)
