"""Shared money helpers used across the ledger, totals and serializers."""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from ..exceptions import ValidationError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

# Largest amount a 12 digit, 2 place money field can hold.
MAX_AMOUNT = Decimal("9999999999.99")
MAX_QUANTITY = 1_000_000


def _coerce_decimal(value: Any, fallback: Decimal, limit: Optional[Decimal] = None) -> Decimal:
    """Return ``value`` as :class:`~decimal.Decimal` or ``fallback`` if invalid.

    Non-finite values, and values whose magnitude exceeds ``limit`` when one
    is given, count as invalid.
    """

    if isinstance(value, bool):
        return fallback
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, TypeError, ValueError):
            return fallback
    if not result.is_finite():
        return fallback
    if limit is not None and abs(result) > limit:
        return fallback
    return result


def to_decimal(value: Any, default: Any = "0", limit: Optional[Decimal] = None) -> Decimal:
    """Normalise ``value`` into :class:`~decimal.Decimal` with a fallback."""

    default_decimal = default if isinstance(default, Decimal) else _coerce_decimal(default, Decimal("0"))
    if value in (None, ""):
        return default_decimal
    return _coerce_decimal(value, default_decimal, limit)


def quantize(amount: Any) -> Decimal:
    """Round ``amount`` to two places using the project's rounding rule.

    Raises :class:`~bizmanager.exceptions.ValidationError` when the amount is
    too large to be represented with two decimal places.
    """

    try:
        return to_decimal(amount).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"Amount {amount} is out of range.") from None


def floor_at_zero(amount: Decimal) -> Decimal:
    return amount if amount > ZERO else ZERO
