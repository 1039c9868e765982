from datetime import date
from decimal import Decimal

from django.apps import apps

from ..entities import Customer, LineItem, PaymentInput, SaleInput
from ..store import BusinessStore


def line(quantity, rate, name="Item", size=""):
    return LineItem(name=name, size=size, quantity=quantity, rate=Decimal(str(rate)))


def make_customer(customer_id="CUST-001", name="Alice", **kwargs):
    kwargs.setdefault("email", f"{name.lower()}@example.com")
    return Customer(id=customer_id, name=name, created_at=date(2024, 6, 1), **kwargs)


def sale_input(customer_id="CUST-001", items=(), transport="0", paid_amount="0", **kwargs):
    return SaleInput(
        customer_id=customer_id,
        items=tuple(items),
        transport=Decimal(transport),
        paid_amount=Decimal(paid_amount),
        **kwargs,
    )


def payment_input(customer_id="CUST-001", amount="0", payment_method="cash", **kwargs):
    return PaymentInput(
        customer_id=customer_id,
        amount=Decimal(amount),
        payment_method=payment_method,
        **kwargs,
    )


def make_store():
    return BusinessStore(today=lambda: date(2024, 6, 20))


def reset_app_store():
    """Give the running app a fresh, empty store and return it."""

    return apps.get_app_config("bizmanager").reset_store()
