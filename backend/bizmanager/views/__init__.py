"""Expose public API views for the application."""

from .activities import ActivityViewSet
from .common import bill_preview, dashboard_summary, reconciliation_report
from .customers import (
    CustomerPaymentViewSet,
    CustomerViewSet,
    customer_balance_report,
)
from .products import InventoryViewSet, ProductViewSet
from .purchases import PurchaseViewSet
from .sales import PaymentViewSet, SaleViewSet

__all__ = [
    'ActivityViewSet',
    'CustomerPaymentViewSet',
    'CustomerViewSet',
    'InventoryViewSet',
    'PaymentViewSet',
    'ProductViewSet',
    'PurchaseViewSet',
    'SaleViewSet',
    'bill_preview',
    'customer_balance_report',
    'dashboard_summary',
    'reconciliation_report',
]
