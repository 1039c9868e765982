"""In-memory business store: the single owner of all application state.

The store holds the customer, product, sale, payment, purchase and inventory
collections and is the only place where they change.  Ledger operations run
under one re-entrant lock: every referenced entity is resolved and the pure
engine in :mod:`bizmanager.services.ledger` computes the new values before
any collection is touched, so a rejected operation never leaves a partial
update behind.

Collections are kept in insertion order and listed newest first.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional

from django.apps import apps

from .activity_logger import log_activity
from .entities import (
    Customer,
    InventoryItem,
    Payment,
    PaymentInput,
    Product,
    Purchase,
    PurchaseInput,
    Sale,
    SaleInput,
)
from .exceptions import LedgerError, NotFound, ValidationError
from .services import identifiers, ledger, reports
from .services.inventory import filter_inventory, inventory_summary
from .services.money import quantize
from .services.totals import DEFAULT_TAX_RATE, calculate_taxed_totals

logger = logging.getLogger(__name__)

ACTIVITY_LOG_LIMIT = 500
CUSTOMER_CONTACT_FIELDS = ('name', 'email', 'phone', 'address')
PRODUCT_FIELDS = ('name', 'size', 'rate')


def _matches(term: Optional[str], *fields: str) -> bool:
    """Case-insensitive substring search over ``fields``."""

    term = (term or '').strip().lower()
    if not term:
        return True
    return any(term in (value or '').lower() for value in fields)


def _newest_first(collection: Dict[str, object]) -> list:
    return list(reversed(list(collection.values())))


class BusinessStore:
    """Owns every collection and applies ledger operations atomically."""

    def __init__(self, *, tax_rate: Decimal = DEFAULT_TAX_RATE, today: Callable[[], date] = date.today,
                 activity_limit: int = ACTIVITY_LOG_LIMIT):
        self.tax_rate = tax_rate
        self._today = today
        self._lock = threading.RLock()
        self._ids = identifiers.IdentifierSequence()
        self._customers: Dict[str, Customer] = {}
        self._products: Dict[str, Product] = {}
        self._sales: Dict[str, Sale] = {}
        self._payments: Dict[str, Payment] = {}
        self._purchases: Dict[str, Purchase] = {}
        self._inventory: Dict[str, InventoryItem] = {}
        # Oldest entries drop off once the log holds activity_limit entries.
        self._activities: deque = deque(maxlen=activity_limit)

    @contextmanager
    def _operation(self, name: str):
        with self._lock:
            try:
                yield
            except LedgerError as exc:
                logger.warning("%s rejected: %s", name, exc)
                raise

    def _resolve(self, collection: Dict[str, object], entity: str, object_id: str):
        try:
            return collection[object_id]
        except KeyError:
            raise NotFound(entity, object_id) from None

    # Customers

    def list_customers(self, search: Optional[str] = None) -> List[Customer]:
        with self._lock:
            return [c for c in _newest_first(self._customers) if _matches(search, c.name, c.id)]

    def get_customer(self, customer_id: str) -> Customer:
        with self._lock:
            return self._resolve(self._customers, 'Customer', customer_id)

    def create_customer(self, name: str, email: str = '', phone: str = '', address: str = '',
                        created_at: Optional[date] = None, customer_id: Optional[str] = None) -> Customer:
        with self._operation('create_customer'):
            if not (name or '').strip():
                raise ValidationError("Customer name is required.", field='name')
            if customer_id is None:
                customer_id = self._ids.next(identifiers.CUSTOMER_PREFIX)
            elif customer_id in self._customers:
                raise ValidationError(f"Customer {customer_id!r} already exists.", field='id')
            else:
                self._ids.observe(customer_id)
            customer = Customer(
                id=customer_id,
                name=name.strip(),
                email=email or '',
                phone=phone or '',
                address=address or '',
                created_at=created_at or self._today(),
            )
            self._customers[customer.id] = customer
            log_activity(self._activities, 'created', customer)
            logger.info("Customer %s created", customer.id)
            return customer

    def update_customer(self, customer_id: str, **fields) -> Customer:
        """Update contact details.  Aggregates only change through the ledger."""

        with self._operation('update_customer'):
            customer = self._resolve(self._customers, 'Customer', customer_id)
            unknown = set(fields) - set(CUSTOMER_CONTACT_FIELDS)
            if unknown:
                raise ValidationError(
                    f"Cannot update {', '.join(sorted(unknown))} on a customer.",
                    field=sorted(unknown)[0],
                )
            if 'name' in fields and not (fields['name'] or '').strip():
                raise ValidationError("Customer name is required.", field='name')
            updated = replace(customer, **{key: value or '' for key, value in fields.items()})
            self._customers[customer_id] = updated
            log_activity(self._activities, 'updated', updated)
            return updated

    def customer_sales(self, customer_id: str) -> List[Sale]:
        with self._lock:
            self._resolve(self._customers, 'Customer', customer_id)
            return [s for s in _newest_first(self._sales) if s.customer_id == customer_id]

    def customer_payments(self, customer_id: str) -> List[Payment]:
        with self._lock:
            self._resolve(self._customers, 'Customer', customer_id)
            return [p for p in _newest_first(self._payments) if p.customer_id == customer_id]

    # Products

    def list_products(self, search: Optional[str] = None) -> List[Product]:
        with self._lock:
            return [p for p in _newest_first(self._products) if _matches(search, p.name, p.size)]

    def get_product(self, product_id: str) -> Product:
        with self._lock:
            return self._resolve(self._products, 'Product', product_id)

    def _check_product_fields(self, fields: dict) -> None:
        if 'name' in fields and not (fields['name'] or '').strip():
            raise ValidationError("Product name is required.", field='name')
        if 'rate' in fields and fields['rate'] < 0:
            raise ValidationError("Rate cannot be negative.", field='rate')

    def create_product(self, name: str, size: str = '', rate: Decimal = Decimal('0'),
                       product_id: Optional[str] = None) -> Product:
        with self._operation('create_product'):
            self._check_product_fields({'name': name, 'rate': rate})
            if product_id is None:
                product_id = self._ids.next(identifiers.PRODUCT_PREFIX)
            elif product_id in self._products:
                raise ValidationError(f"Product {product_id!r} already exists.", field='id')
            else:
                self._ids.observe(product_id)
            product = Product(id=product_id, name=name.strip(), size=size or '', rate=quantize(rate))
            self._products[product.id] = product
            log_activity(self._activities, 'created', product)
            return product

    def update_product(self, product_id: str, **fields) -> Product:
        """Edit a catalog entry.  Existing sale lines keep their copied values."""

        with self._operation('update_product'):
            product = self._resolve(self._products, 'Product', product_id)
            unknown = set(fields) - set(PRODUCT_FIELDS)
            if unknown:
                raise ValidationError(f"Unknown product field {sorted(unknown)[0]!r}.", field=sorted(unknown)[0])
            self._check_product_fields(fields)
            if 'rate' in fields:
                fields['rate'] = quantize(fields['rate'])
            updated = replace(product, **fields)
            self._products[product_id] = updated
            log_activity(self._activities, 'updated', updated)
            return updated

    def delete_product(self, product_id: str) -> None:
        with self._operation('delete_product'):
            product = self._resolve(self._products, 'Product', product_id)
            del self._products[product_id]
            log_activity(self._activities, 'deleted', product)

    # Sales

    def list_sales(self, search: Optional[str] = None, customer_id: Optional[str] = None) -> List[Sale]:
        with self._lock:
            return [
                s for s in _newest_first(self._sales)
                if _matches(search, s.customer_name, s.id)
                and (customer_id is None or s.customer_id == customer_id)
            ]

    def get_sale(self, sale_id: str) -> Sale:
        with self._lock:
            return self._resolve(self._sales, 'Sale', sale_id)

    def create_sale(self, sale_input: SaleInput) -> Sale:
        with self._operation('create_sale'):
            customer = self._customers.get(sale_input.customer_id)
            sale, customer = ledger.apply_sale_create(
                customer,
                sale_input,
                sale_id=self._ids.peek(identifiers.SALE_PREFIX),
                on_date=self._today(),
            )
            self._ids.next(identifiers.SALE_PREFIX)
            self._sales[sale.id] = sale
            self._customers[customer.id] = customer
            log_activity(self._activities, 'created', sale)
            logger.info(
                "Sale %s created for %s: total=%s outstanding=%s status=%s",
                sale.id, customer.id, sale.total, sale.outstanding_amount, sale.status,
            )
            return sale

    def update_sale(self, sale_id: str, sale_input: SaleInput) -> Sale:
        with self._operation('update_sale'):
            old_sale = self._resolve(self._sales, 'Sale', sale_id)
            customer = self._customers.get(old_sale.customer_id)
            new_customer = None
            if sale_input.customer_id != old_sale.customer_id:
                new_customer = self._customers.get(sale_input.customer_id)
            sale, customer, new_customer = ledger.apply_sale_edit(old_sale, sale_input, customer, new_customer)

            self._sales[sale.id] = sale
            self._customers[customer.id] = customer
            description = None
            if new_customer is not None:
                self._customers[new_customer.id] = new_customer
                description = f"Sale {sale.id} moved from {customer.name} to {new_customer.name}."
            log_activity(self._activities, 'updated', sale, description)
            logger.info("Sale %s updated: total=%s outstanding=%s", sale.id, sale.total, sale.outstanding_amount)
            return sale

    def delete_sale(self, sale_id: str) -> None:
        with self._operation('delete_sale'):
            sale = self._resolve(self._sales, 'Sale', sale_id)
            customer = ledger.apply_sale_delete(sale, self._customers.get(sale.customer_id))
            del self._sales[sale_id]
            self._customers[customer.id] = customer
            log_activity(self._activities, 'deleted', sale)
            logger.info("Sale %s deleted; %s balance now %s", sale.id, customer.id, customer.outstanding_balance)

    # Payments

    def list_payments(self, search: Optional[str] = None, customer_id: Optional[str] = None) -> List[Payment]:
        with self._lock:
            return [
                p for p in _newest_first(self._payments)
                if _matches(search, p.customer_name, p.invoice_id)
                and (customer_id is None or p.customer_id == customer_id)
            ]

    def get_payment(self, payment_id: str) -> Payment:
        with self._lock:
            return self._resolve(self._payments, 'Payment', payment_id)

    def create_payment(self, payment_input: PaymentInput) -> Payment:
        with self._operation('create_payment'):
            payment, customer = ledger.apply_payment_create(
                self._customers.get(payment_input.customer_id),
                payment_input,
                payment_id=self._ids.peek(identifiers.PAYMENT_PREFIX),
                on_date=self._today(),
            )
            self._ids.next(identifiers.PAYMENT_PREFIX)
            self._payments[payment.id] = payment
            self._customers[customer.id] = customer
            log_activity(self._activities, 'created', payment)
            logger.info(
                "Payment %s of %s recorded for %s; balance now %s",
                payment.id, payment.amount, customer.id, customer.outstanding_balance,
            )
            return payment

    def update_payment(self, payment_id: str, payment_input: PaymentInput) -> Payment:
        with self._operation('update_payment'):
            old_payment = self._resolve(self._payments, 'Payment', payment_id)
            customer = self._customers.get(old_payment.customer_id)

            if payment_input.customer_id == old_payment.customer_id:
                payment, customer = ledger.apply_payment_edit(old_payment, payment_input, customer)
                self._payments[payment.id] = payment
                self._customers[customer.id] = customer
                log_activity(self._activities, 'updated', payment)
                return payment

            # Moving a payment: give it back to the old customer, then apply
            # it to the new one as if it had just been received.
            previous_owner = ledger.apply_payment_delete(old_payment, customer)
            moved, new_owner = ledger.apply_payment_create(
                self._customers.get(payment_input.customer_id),
                payment_input,
                payment_id=old_payment.id,
                on_date=old_payment.date,
            )
            self._payments[moved.id] = moved
            self._customers[previous_owner.id] = previous_owner
            self._customers[new_owner.id] = new_owner
            log_activity(
                self._activities, 'updated', moved,
                f"Payment {moved.id} moved from {previous_owner.name} to {new_owner.name}.",
            )
            return moved

    def delete_payment(self, payment_id: str) -> None:
        with self._operation('delete_payment'):
            payment = self._resolve(self._payments, 'Payment', payment_id)
            customer = ledger.apply_payment_delete(payment, self._customers.get(payment.customer_id))
            del self._payments[payment_id]
            self._customers[customer.id] = customer
            log_activity(self._activities, 'deleted', payment)
            logger.info("Payment %s deleted; %s balance now %s", payment.id, customer.id, customer.outstanding_balance)

    # Purchases

    def list_purchases(self, search: Optional[str] = None) -> List[Purchase]:
        with self._lock:
            return [
                p for p in _newest_first(self._purchases)
                if _matches(search, p.supplier, p.id, p.invoice_number)
            ]

    def get_purchase(self, purchase_id: str) -> Purchase:
        with self._lock:
            return self._resolve(self._purchases, 'Purchase', purchase_id)

    def create_purchase(self, purchase_input: PurchaseInput) -> Purchase:
        with self._operation('create_purchase'):
            if not (purchase_input.supplier or '').strip():
                raise ValidationError("Supplier is required.", field='supplier')
            for index, item in enumerate(purchase_input.items):
                if item.quantity < 0 or item.unit_price < 0:
                    raise ValidationError(
                        f"Item {index + 1}: quantity and unit price cannot be negative.",
                        field='items',
                    )
            totals = calculate_taxed_totals(purchase_input.items, self.tax_rate)
            purchase = Purchase(
                id=self._ids.next(identifiers.PURCHASE_PREFIX),
                date=purchase_input.date or self._today(),
                supplier=purchase_input.supplier.strip(),
                supplier_email=purchase_input.supplier_email or '',
                invoice_number=purchase_input.invoice_number or '',
                items=tuple(purchase_input.items),
                subtotal=totals.subtotal,
                tax=totals.tax,
                total=totals.total,
            )
            self._purchases[purchase.id] = purchase
            log_activity(self._activities, 'created', purchase)
            return purchase

    def delete_purchase(self, purchase_id: str) -> None:
        with self._operation('delete_purchase'):
            purchase = self._resolve(self._purchases, 'Purchase', purchase_id)
            del self._purchases[purchase_id]
            log_activity(self._activities, 'deleted', purchase)

    # Inventory

    def list_inventory(self, search: Optional[str] = None, category: Optional[str] = None) -> List[InventoryItem]:
        with self._lock:
            return filter_inventory(self._inventory.values(), search, category)

    def add_inventory_item(self, name: str, category: str = '', current_stock: int = 0, min_stock: int = 0,
                           unit_price: Decimal = Decimal('0'), last_updated: Optional[date] = None) -> InventoryItem:
        with self._operation('add_inventory_item'):
            if current_stock < 0 or min_stock < 0 or unit_price < 0:
                raise ValidationError("Stock levels and unit price cannot be negative.")
            item = InventoryItem(
                id=self._ids.next(identifiers.INVENTORY_PREFIX),
                name=name,
                category=category or '',
                current_stock=current_stock,
                min_stock=min_stock,
                unit_price=quantize(unit_price),
                last_updated=last_updated or self._today(),
            )
            self._inventory[item.id] = item
            log_activity(self._activities, 'created', item)
            return item

    def inventory_summary(self) -> dict:
        with self._lock:
            return inventory_summary(self._inventory.values())

    # Activity log and reports

    def list_activities(self, on_date: Optional[date] = None) -> list:
        with self._lock:
            if on_date is None:
                return list(self._activities)
            return [a for a in self._activities if a.timestamp.date() == on_date]

    def dashboard(self, recent_limit: int = 4) -> dict:
        with self._lock:
            return reports.dashboard_summary(
                list(self._customers.values()),
                _newest_first(self._sales),
                list(self._payments.values()),
                _newest_first(self._purchases),
                today=self._today(),
                recent_limit=recent_limit,
            )

    def reconcile(self, customers: Optional[Iterable[str]] = None) -> List[ledger.Reconciliation]:
        """Compare stored customer aggregates with their sale/payment history."""

        with self._lock:
            targets = [self._resolve(self._customers, 'Customer', cid) for cid in customers] \
                if customers is not None else list(self._customers.values())
            results = [
                ledger.reconcile_customer(customer, self._sales.values(), self._payments.values())
                for customer in targets
            ]
            for result in results:
                if not result.is_consistent:
                    logger.warning(
                        "Customer %s drifted: balance %s (expected %s), purchases %s (expected %s)",
                        result.customer_id, result.stored_balance, result.expected_balance,
                        result.stored_total_purchases, result.expected_total_purchases,
                    )
            return results

    def repair_balances(self) -> List[ledger.Reconciliation]:
        """Reset every drifted customer to the values rebuilt from history."""

        with self._lock:
            repaired = [result for result in self.reconcile() if not result.is_consistent]
            for result in repaired:
                customer = self._customers[result.customer_id]
                updated = replace(
                    customer,
                    total_purchases=result.expected_total_purchases,
                    outstanding_balance=result.expected_balance,
                )
                self._customers[customer.id] = updated
                log_activity(
                    self._activities, 'updated', updated,
                    f"Customer {updated.id} balance reset to {updated.outstanding_balance}.",
                )
                logger.info("Customer %s balance updated to %s", updated.id, updated.outstanding_balance)
            return repaired


def get_store() -> BusinessStore:
    """Return the store owned by the ``bizmanager`` app config."""

    return apps.get_app_config('bizmanager').store
