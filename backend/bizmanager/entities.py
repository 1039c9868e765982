"""In-memory entity values for the business manager.

Every entity is a frozen dataclass.  Ledger operations never mutate an entity
in place; they return a new value built with :func:`dataclasses.replace`, and
the store swaps the new value into its collection.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple

from .services.money import ZERO, floor_at_zero, quantize
from .services.totals import derive_status, line_amount

PAYMENT_METHODS = [
    ('cash', 'Cash'),
    ('card', 'Card'),
    ('upi', 'UPI'),
    ('bank_transfer', 'Bank Transfer'),
    ('cheque', 'Cheque'),
]

PURCHASE_PENDING = 'pending'

STOCK_LOW = 'low'
STOCK_MEDIUM = 'medium'
STOCK_GOOD = 'good'


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    email: str = ''
    phone: str = ''
    address: str = ''
    total_purchases: Decimal = ZERO
    outstanding_balance: Decimal = ZERO
    created_at: date = field(default_factory=date.today)

    def __str__(self):
        return self.name

    @property
    def display_balance(self) -> Decimal:
        """Outstanding balance as shown to users, never below zero."""
        return floor_at_zero(self.outstanding_balance)

    @property
    def balance_status(self) -> str:
        if self.outstanding_balance > 0:
            return 'owes_us'
        if self.outstanding_balance < 0:
            return 'we_owe_them'
        return 'settled'


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    size: str = ''
    rate: Decimal = ZERO

    def __str__(self):
        return f"{self.name} ({self.size})" if self.size else self.name


@dataclass(frozen=True)
class LineItem:
    name: str
    size: str = ''
    quantity: int = 0
    rate: Decimal = ZERO

    @property
    def amount(self) -> Decimal:
        return line_amount(self.quantity, self.rate)


@dataclass(frozen=True)
class SaleInput:
    """Draft of a sale as submitted by the presentation layer."""

    customer_id: str
    items: Tuple[LineItem, ...] = ()
    transport: Decimal = ZERO
    paid_amount: Decimal = ZERO
    date: Optional[date] = None


@dataclass(frozen=True)
class Sale:
    id: str
    date: date
    customer_id: str
    customer_name: str
    customer_email: str
    items: Tuple[LineItem, ...]
    subtotal: Decimal
    transport: Decimal
    total: Decimal
    paid_amount: Decimal
    outstanding_amount: Decimal

    def __str__(self):
        return f"Sale {self.id} for {self.customer_name}"

    @property
    def status(self) -> str:
        # Recomputed on every read so it can never disagree with the amounts.
        return derive_status(self.total, self.paid_amount)


@dataclass(frozen=True)
class PaymentInput:
    customer_id: str
    amount: Decimal
    payment_method: str = 'cash'
    invoice_id: str = ''
    notes: str = ''
    date: Optional[date] = None


@dataclass(frozen=True)
class Payment:
    id: str
    customer_id: str
    customer_name: str
    invoice_id: str
    amount: Decimal
    payment_method: str
    date: date
    notes: str = ''

    def __str__(self):
        return f"Payment of {self.amount} from {self.customer_name}"


@dataclass(frozen=True)
class PurchaseItem:
    name: str
    size: str = ''
    quantity: int = 0
    unit_price: Decimal = ZERO

    @property
    def amount(self) -> Decimal:
        return line_amount(self.quantity, self.unit_price)


@dataclass(frozen=True)
class PurchaseInput:
    supplier: str
    supplier_email: str = ''
    invoice_number: str = ''
    items: Tuple[PurchaseItem, ...] = ()
    date: Optional[date] = None


@dataclass(frozen=True)
class Purchase:
    id: str
    date: date
    supplier: str
    supplier_email: str
    invoice_number: str
    items: Tuple[PurchaseItem, ...]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    status: str = PURCHASE_PENDING

    def __str__(self):
        return f"Purchase {self.id} from {self.supplier}"


@dataclass(frozen=True)
class InventoryItem:
    id: str
    name: str
    category: str = ''
    current_stock: int = 0
    min_stock: int = 0
    unit_price: Decimal = ZERO
    last_updated: date = field(default_factory=date.today)

    def __str__(self):
        return self.name

    @property
    def total_value(self) -> Decimal:
        return quantize(Decimal(self.current_stock) * self.unit_price)

    @property
    def stock_status(self) -> str:
        if self.current_stock <= self.min_stock:
            return STOCK_LOW
        if self.current_stock <= Decimal(self.min_stock) * Decimal("1.5"):
            return STOCK_MEDIUM
        return STOCK_GOOD


@dataclass(frozen=True)
class Activity:
    action_type: str
    entity: str
    object_id: str
    description: str
    timestamp: datetime
