"""Demo data loaded into a fresh store when ``SEED_DEMO_DATA`` is enabled.

Sales and payments go through the ledger engine, so the seeded customer
aggregates are consistent with the seeded history.
"""

from datetime import date
from decimal import Decimal

from .entities import LineItem, PaymentInput, SaleInput


def seed_demo_data(store):
    abc = store.create_customer(
        name="ABC Corporation",
        email="contact@abc.com",
        phone="+91 9876543210",
        address="123 Business Street, Mumbai",
        created_at=date(2024, 6, 1),
    )
    tech = store.create_customer(
        name="Tech Solutions Ltd",
        email="info@techsolutions.com",
        phone="+91 9876543211",
        address="456 Tech Park, Bangalore",
        created_at=date(2024, 6, 5),
    )

    for name, size, rate in [
        ("Premium Rice", "25kg", "1500"),
        ("Wheat Flour", "10kg", "450"),
        ("Cooking Oil", "5L", "650"),
        ("Sugar", "1kg", "45"),
        ("Tea Leaves", "500g", "280"),
    ]:
        store.create_product(name=name, size=size, rate=Decimal(rate))

    store.create_sale(SaleInput(
        customer_id=tech.id,
        items=(
            LineItem(name="Cooking Oil", size="5L", quantity=10, rate=Decimal("650")),
            LineItem(name="Sugar", size="1kg", quantity=20, rate=Decimal("45")),
        ),
        transport=Decimal("300"),
        paid_amount=Decimal("7700"),
        date=date(2024, 6, 19),
    ))
    abc_sale = store.create_sale(SaleInput(
        customer_id=abc.id,
        items=(
            LineItem(name="Premium Rice", size="25kg", quantity=5, rate=Decimal("1500")),
            LineItem(name="Wheat Flour", size="10kg", quantity=3, rate=Decimal("450")),
        ),
        transport=Decimal("500"),
        paid_amount=Decimal("5000"),
        date=date(2024, 6, 20),
    ))
    store.create_payment(PaymentInput(
        customer_id=abc.id,
        amount=Decimal("3000"),
        payment_method="upi",
        invoice_id=abc_sale.id,
        notes="Partial payment for order #123",
        date=date(2024, 6, 20),
    ))

    for name, category, current, minimum, price, updated in [
        ("Product A", "Electronics", 45, 10, "100", date(2024, 6, 20)),
        ("Product B", "Electronics", 23, 15, "250", date(2024, 6, 19)),
        ("Raw Material A", "Materials", 150, 50, "15", date(2024, 6, 20)),
        ("Component B", "Components", 75, 25, "25", date(2024, 6, 20)),
        ("Product C", "Electronics", 8, 20, "150", date(2024, 6, 18)),
    ]:
        store.add_inventory_item(
            name=name,
            category=category,
            current_stock=current,
            min_stock=minimum,
            unit_price=Decimal(price),
            last_updated=updated,
        )
    return store
