"""Stock level helpers for the inventory table and its summary cards."""
from __future__ import annotations

from typing import Iterable, List, Optional

from ..entities import STOCK_LOW, InventoryItem
from .money import ZERO, quantize

ALL_CATEGORIES = "all"


def categories(items: Iterable[InventoryItem]) -> List[str]:
    """Return ``"all"`` followed by each distinct category in first-seen order."""

    seen = []
    for item in items:
        if item.category and item.category not in seen:
            seen.append(item.category)
    return [ALL_CATEGORIES] + seen


def filter_inventory(
    items: Iterable[InventoryItem],
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> List[InventoryItem]:
    term = (search or "").strip().lower()
    results = []
    for item in items:
        if term and term not in item.name.lower() and term not in item.id.lower():
            continue
        if category and category != ALL_CATEGORIES and item.category != category:
            continue
        results.append(item)
    return results


def low_stock_items(items: Iterable[InventoryItem]) -> List[InventoryItem]:
    return [item for item in items if item.stock_status == STOCK_LOW]


def inventory_summary(items: Iterable[InventoryItem]) -> dict:
    items = list(items)
    return {
        "total_items": len(items),
        "total_units": sum(item.current_stock for item in items),
        "total_value": quantize(sum((item.total_value for item in items), ZERO)),
        "low_stock_count": len(low_stock_items(items)),
        "categories": categories(items),
    }
