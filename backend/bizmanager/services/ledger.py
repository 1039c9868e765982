"""Ledger consistency engine binding customers, sales and payments.

Every function here is a pure state transition: it receives entity values,
validates the input, and returns new entity values.  Nothing is mutated in
place and nothing is stored; the caller (normally
:class:`bizmanager.store.BusinessStore`) swaps the returned values into its
collections.  Because validation runs before any value is built, a rejected
operation leaves the caller's state untouched.

Balances are maintained incrementally.  Sales add to a customer's
``outstanding_balance`` without clamping, payments subtract from it and clamp
the result at zero, edits apply the difference between the new and the old
values and deletions reverse the original effect without clamping.  The clamp
on payments loses information (an over-payment cannot be recovered later),
which :func:`reconcile_customer` makes visible.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Tuple

from ..entities import (
    PAYMENT_METHODS,
    Customer,
    Payment,
    PaymentInput,
    Sale,
    SaleInput,
)
from ..exceptions import NotFound, ValidationError
from .money import ZERO, floor_at_zero, quantize
from .totals import SaleTotals, calculate_sale_totals

__all__ = [
    "Reconciliation",
    "apply_payment_create",
    "apply_payment_delete",
    "apply_payment_edit",
    "apply_sale_create",
    "apply_sale_delete",
    "apply_sale_edit",
    "reconcile_customer",
    "sale_totals",
]

_PAYMENT_METHOD_CODES = {code for code, _label in PAYMENT_METHODS}


@dataclass(frozen=True)
class Reconciliation:
    """Stored customer aggregates compared with values rebuilt from history."""

    customer_id: str
    stored_total_purchases: Decimal
    expected_total_purchases: Decimal
    stored_balance: Decimal
    ledger_balance: Decimal

    @property
    def expected_balance(self) -> Decimal:
        return floor_at_zero(self.ledger_balance)

    @property
    def balance_drift(self) -> Decimal:
        return quantize(self.stored_balance - self.expected_balance)

    @property
    def purchases_drift(self) -> Decimal:
        return quantize(self.stored_total_purchases - self.expected_total_purchases)

    @property
    def is_consistent(self) -> bool:
        return not self.balance_drift and not self.purchases_drift


def _require_customer(customer: Optional[Customer], customer_id: str) -> Customer:
    if customer is None:
        raise NotFound("Customer", customer_id)
    if customer.id != customer_id:
        raise ValidationError(
            f"Customer {customer.id!r} supplied for a record owned by {customer_id!r}.",
            field="customer_id",
        )
    return customer


def _adjust(customer: Customer, *, purchases_delta: Decimal = ZERO, balance_delta: Decimal = ZERO) -> Customer:
    """Return ``customer`` with both aggregates moved by the given deltas."""

    return replace(
        customer,
        total_purchases=quantize(customer.total_purchases + purchases_delta),
        outstanding_balance=quantize(customer.outstanding_balance + balance_delta),
    )


def _validate_sale_input(sale_input: SaleInput) -> SaleTotals:
    for index, item in enumerate(sale_input.items):
        if item.quantity < 0:
            raise ValidationError(f"Item {index + 1}: quantity cannot be negative.", field="items")
        if item.rate < 0:
            raise ValidationError(f"Item {index + 1}: rate cannot be negative.", field="items")
    if sale_input.transport < 0:
        raise ValidationError("Transport charge cannot be negative.", field="transport")
    if sale_input.paid_amount < 0:
        raise ValidationError("Paid amount cannot be negative.", field="paid_amount")

    totals = sale_totals(sale_input)
    if quantize(sale_input.paid_amount) > totals.total:
        raise ValidationError("Paid amount cannot exceed the sale total.", field="paid_amount")
    return totals


def _validate_payment_input(payment_input: PaymentInput) -> None:
    if payment_input.amount <= 0:
        raise ValidationError("Payment amount must be greater than zero.", field="amount")
    if payment_input.payment_method not in _PAYMENT_METHOD_CODES:
        raise ValidationError(
            f"Unknown payment method {payment_input.payment_method!r}.",
            field="payment_method",
        )


def sale_totals(sale_input: SaleInput) -> SaleTotals:
    """Derived amounts of a sale draft; safe to call on every form change."""

    return calculate_sale_totals(sale_input.items, sale_input.transport, sale_input.paid_amount)


def _build_sale(sale_id: str, on_date: date, customer: Customer, sale_input: SaleInput, totals: SaleTotals) -> Sale:
    return Sale(
        id=sale_id,
        date=on_date,
        customer_id=customer.id,
        customer_name=customer.name,
        customer_email=customer.email,
        items=tuple(sale_input.items),
        subtotal=totals.subtotal,
        transport=quantize(sale_input.transport),
        total=totals.total,
        paid_amount=quantize(sale_input.paid_amount),
        outstanding_amount=totals.outstanding_amount,
    )


def apply_sale_create(
    customer: Optional[Customer],
    sale_input: SaleInput,
    *,
    sale_id: str,
    on_date: Optional[date] = None,
) -> Tuple[Sale, Customer]:
    """Record a new sale against ``customer``."""

    customer = _require_customer(customer, sale_input.customer_id)
    totals = _validate_sale_input(sale_input)

    sale = _build_sale(sale_id, sale_input.date or on_date or date.today(), customer, sale_input, totals)
    updated = _adjust(customer, purchases_delta=sale.total, balance_delta=sale.outstanding_amount)
    return sale, updated


def apply_sale_edit(
    old_sale: Sale,
    sale_input: SaleInput,
    customer: Optional[Customer],
    new_customer: Optional[Customer] = None,
) -> Tuple[Sale, Customer, Optional[Customer]]:
    """Replace ``old_sale`` with ``sale_input`` keeping the same identifier.

    Returns ``(sale, customer, new_customer)``.  ``new_customer`` is only
    required, and only returned updated, when the edit moves the sale to a
    different customer; the previous owner then loses the old amounts and
    the new owner gains the new ones.
    """

    customer = _require_customer(customer, old_sale.customer_id)
    totals = _validate_sale_input(sale_input)
    on_date = sale_input.date or old_sale.date

    if sale_input.customer_id == old_sale.customer_id:
        # Snapshot fields keep the values captured when the sale was created.
        sale = replace(
            _build_sale(old_sale.id, on_date, customer, sale_input, totals),
            customer_name=old_sale.customer_name,
            customer_email=old_sale.customer_email,
        )
        updated = _adjust(
            customer,
            purchases_delta=sale.total - old_sale.total,
            balance_delta=sale.outstanding_amount - old_sale.outstanding_amount,
        )
        return sale, updated, None

    new_customer = _require_customer(new_customer, sale_input.customer_id)
    sale = _build_sale(old_sale.id, on_date, new_customer, sale_input, totals)
    previous_owner = _adjust(
        customer,
        purchases_delta=-old_sale.total,
        balance_delta=-old_sale.outstanding_amount,
    )
    new_owner = _adjust(
        new_customer,
        purchases_delta=sale.total,
        balance_delta=sale.outstanding_amount,
    )
    return sale, previous_owner, new_owner


def apply_sale_delete(sale: Sale, customer: Optional[Customer]) -> Customer:
    """Reverse the effect of ``sale`` on its customer.  Not clamped."""

    customer = _require_customer(customer, sale.customer_id)
    return _adjust(customer, purchases_delta=-sale.total, balance_delta=-sale.outstanding_amount)


def apply_payment_create(
    customer: Optional[Customer],
    payment_input: PaymentInput,
    *,
    payment_id: str,
    on_date: Optional[date] = None,
) -> Tuple[Payment, Customer]:
    """Record a payment; the customer's balance is floored at zero."""

    customer = _require_customer(customer, payment_input.customer_id)
    _validate_payment_input(payment_input)

    payment = Payment(
        id=payment_id,
        customer_id=customer.id,
        customer_name=customer.name,
        invoice_id=payment_input.invoice_id or '',
        amount=quantize(payment_input.amount),
        payment_method=payment_input.payment_method,
        date=payment_input.date or on_date or date.today(),
        notes=payment_input.notes or '',
    )
    updated = replace(
        customer,
        outstanding_balance=floor_at_zero(quantize(customer.outstanding_balance - payment.amount)),
    )
    return payment, updated


def apply_payment_edit(
    old_payment: Payment,
    payment_input: PaymentInput,
    customer: Optional[Customer],
) -> Tuple[Payment, Customer]:
    """Apply the difference between the new and the old payment amount.

    The result is floored at zero, so repeated edits can drift away from a
    balance recomputed from history.
    """

    customer = _require_customer(customer, old_payment.customer_id)
    if payment_input.customer_id != old_payment.customer_id:
        raise ValidationError(
            "A payment edit cannot change the customer; delete and re-create it instead.",
            field="customer_id",
        )
    _validate_payment_input(payment_input)

    payment = replace(
        old_payment,
        invoice_id=payment_input.invoice_id or '',
        amount=quantize(payment_input.amount),
        payment_method=payment_input.payment_method,
        date=payment_input.date or old_payment.date,
        notes=payment_input.notes or '',
    )
    difference = payment.amount - old_payment.amount
    updated = replace(
        customer,
        outstanding_balance=floor_at_zero(quantize(customer.outstanding_balance - difference)),
    )
    return payment, updated


def apply_payment_delete(payment: Payment, customer: Optional[Customer]) -> Customer:
    """Give the payment amount back to the customer's balance.  Not clamped."""

    customer = _require_customer(customer, payment.customer_id)
    return _adjust(customer, balance_delta=payment.amount)


def reconcile_customer(customer: Customer, sales: Iterable[Sale], payments: Iterable[Payment]) -> Reconciliation:
    """Rebuild ``customer``'s aggregates from its sales and payments.

    The amount paid up front on a sale is settled at sale time, so the ledger
    balance is the sum of sale outstanding amounts minus the sum of payments.
    """

    own_sales = [sale for sale in sales if sale.customer_id == customer.id]
    own_payments = [payment for payment in payments if payment.customer_id == customer.id]

    expected_total = quantize(sum((sale.total for sale in own_sales), ZERO))
    owed = sum((sale.outstanding_amount for sale in own_sales), ZERO)
    paid = sum((payment.amount for payment in own_payments), ZERO)

    return Reconciliation(
        customer_id=customer.id,
        stored_total_purchases=customer.total_purchases,
        expected_total_purchases=expected_total,
        stored_balance=customer.outstanding_balance,
        ledger_balance=quantize(owed - paid),
    )
