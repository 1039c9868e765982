"""Pure total calculations for sales, purchases and printable bills.

Nothing in here touches the store: the functions are safe to call on every
keystroke of a draft form and always return the same result for the same
input.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .money import ZERO, quantize

STATUS_PAID = "paid"
STATUS_PARTIAL = "partial"
STATUS_UNPAID = "unpaid"

DEFAULT_TAX_RATE = Decimal("0.10")


@dataclass(frozen=True)
class SaleTotals:
    subtotal: Decimal
    total: Decimal
    outstanding_amount: Decimal
    status: str


@dataclass(frozen=True)
class TaxedTotals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def line_amount(quantity, rate) -> Decimal:
    return quantize(Decimal(quantity) * Decimal(rate))


def items_subtotal(items: Iterable) -> Decimal:
    """Sum the ``amount`` of every line item."""

    return quantize(sum((item.amount for item in items), ZERO))


def derive_status(total: Decimal, paid_amount: Decimal) -> str:
    """Return the invoice status for a ``(total, paid_amount)`` pair.

    ``paid`` when nothing is left to pay, ``unpaid`` when nothing was paid
    against a positive total, ``partial`` otherwise.
    """

    if paid_amount >= total:
        return STATUS_PAID
    if paid_amount == ZERO:
        return STATUS_UNPAID
    return STATUS_PARTIAL


def calculate_sale_totals(items: Iterable, transport: Decimal, paid_amount: Decimal) -> SaleTotals:
    subtotal = items_subtotal(items)
    total = quantize(subtotal + transport)
    paid_amount = quantize(paid_amount)
    return SaleTotals(
        subtotal=subtotal,
        total=total,
        outstanding_amount=quantize(total - paid_amount),
        status=derive_status(total, paid_amount),
    )


def calculate_taxed_totals(items: Iterable, tax_rate: Decimal = DEFAULT_TAX_RATE) -> TaxedTotals:
    """Subtotal plus a flat tax, as used for purchases and printable bills."""

    subtotal = items_subtotal(items)
    tax = quantize(subtotal * tax_rate)
    return TaxedTotals(subtotal=subtotal, tax=tax, total=quantize(subtotal + tax))
