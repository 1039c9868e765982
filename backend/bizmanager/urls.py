"""URL routing for the business manager API."""

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_nested import routers

from .views import (
    ActivityViewSet,
    CustomerPaymentViewSet,
    CustomerViewSet,
    InventoryViewSet,
    PaymentViewSet,
    ProductViewSet,
    PurchaseViewSet,
    SaleViewSet,
    bill_preview,
    customer_balance_report,
    dashboard_summary,
    reconciliation_report,
)

router = DefaultRouter()
router.register(r'customers', CustomerViewSet, basename='customer')
router.register(r'products', ProductViewSet, basename='product')
router.register(r'sales', SaleViewSet, basename='sale')
router.register(r'payments', PaymentViewSet, basename='payment')
router.register(r'purchases', PurchaseViewSet, basename='purchase')
router.register(r'inventory', InventoryViewSet, basename='inventory')
router.register(r'activities', ActivityViewSet, basename='activity')

customers_router = routers.NestedSimpleRouter(router, r'customers', lookup='customer')
customers_router.register(r'payments', CustomerPaymentViewSet, basename='customer-payments')

urlpatterns = [
    path('dashboard/summary/', dashboard_summary, name='dashboard-summary'),
    path('bills/preview/', bill_preview, name='bill-preview'),
    path('reports/customer-balances/', customer_balance_report, name='customer-balance-report'),
    path('reports/reconciliation/', reconciliation_report, name='reconciliation-report'),
    path('', include(router.urls)),
    path('', include(customers_router.urls)),
]
