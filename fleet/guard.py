"""Input guards used by every entity constructor and mutator."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, TypeVar

from .errors import ErrorKind, ValidationError

T = TypeVar("T")

# Stored amounts keep at most 15 significant digits so they survive the
# float form used in the JSON files.
CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("1000000000")


def not_blank(value: Optional[str], name: str) -> str:
    """Return the trimmed value, rejecting None, empty and whitespace-only text."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} must not be empty.", ErrorKind.BLANK)
    return str(value).strip()


def in_range(value: T, minimum: T, maximum: T, name: str) -> T:
    """Return value unchanged if minimum <= value <= maximum (inclusive)."""
    if value < minimum or value > maximum:
        raise ValidationError(
            f"{name} must be between {minimum} and {maximum}.", ErrorKind.OUT_OF_RANGE
        )
    return value


def greater_than_zero(value: T, name: str) -> T:
    """Return value unchanged if it is strictly positive."""
    if value <= 0:
        raise ValidationError(
            f"{name} must be greater than 0.", ErrorKind.OUT_OF_RANGE
        )
    return value


def to_cents(value: Any) -> Decimal:
    """Round a number half-up to two decimal places."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def money(value: Any, name: str) -> Decimal:
    """
    Return a positive amount rounded to cents.

    Amounts above MAX_AMOUNT and amounts that round to zero are rejected.
    """
    amount = Decimal(value)
    if amount > MAX_AMOUNT:
        raise ValidationError(
            f"{name} must not exceed {MAX_AMOUNT}.", ErrorKind.OUT_OF_RANGE
        )
    return greater_than_zero(to_cents(amount), name)
