"""Aggregates behind the dashboard and the customer balance report."""
from __future__ import annotations

from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Sequence

from ..entities import Customer, Payment, Purchase, Sale
from .money import ZERO, quantize


def _sum(values: Iterable[Decimal]) -> Decimal:
    return quantize(sum(values, ZERO))


def recent_transactions(sales: Sequence[Sale], purchases: Sequence[Purchase], limit: int = 4) -> List[dict]:
    """Latest sales and purchases merged newest first."""

    entries = [
        {
            "id": sale.id,
            "type": "sale",
            "party": sale.customer_name,
            "amount": sale.total,
            "date": sale.date,
        }
        for sale in sales
    ]
    entries.extend(
        {
            "id": purchase.id,
            "type": "purchase",
            "party": purchase.supplier,
            "amount": purchase.total,
            "date": purchase.date,
        }
        for purchase in purchases
    )
    # Stable sort keeps the store's newest-first order for same-day entries.
    entries.sort(key=lambda entry: entry["date"], reverse=True)
    return entries[:limit]


def monthly_totals(sales: Iterable[Sale], purchases: Iterable[Purchase]) -> List[dict]:
    """Sales and purchase totals per ``YYYY-MM`` month, oldest month first."""

    months: "OrderedDict[str, dict]" = OrderedDict()

    def _bucket(on_date: date) -> dict:
        key = on_date.strftime("%Y-%m")
        if key not in months:
            months[key] = {"month": key, "sales": ZERO, "purchases": ZERO}
        return months[key]

    for sale in sales:
        bucket = _bucket(sale.date)
        bucket["sales"] = quantize(bucket["sales"] + sale.total)
    for purchase in purchases:
        bucket = _bucket(purchase.date)
        bucket["purchases"] = quantize(bucket["purchases"] + purchase.total)

    return [months[key] for key in sorted(months)]


def dashboard_summary(
    customers: Sequence[Customer],
    sales: Sequence[Sale],
    payments: Sequence[Payment],
    purchases: Sequence[Purchase],
    *,
    today: date,
    recent_limit: int = 4,
) -> dict:
    total_sales = _sum(sale.total for sale in sales)
    total_purchases = _sum(purchase.total for purchase in purchases)
    return {
        "total_sales": total_sales,
        "total_purchases": total_purchases,
        "gross_profit": quantize(total_sales - total_purchases),
        "total_receivables": _sum(customer.display_balance for customer in customers),
        "payments_received": _sum(payment.amount for payment in payments),
        "customer_count": len(customers),
        "today_sales": _sum(sale.total for sale in sales if sale.date == today),
        "today_incoming": _sum(payment.amount for payment in payments if payment.date == today),
        "recent_transactions": recent_transactions(sales, purchases, recent_limit),
        "monthly": monthly_totals(sales, purchases),
    }
