"""Tests for the dashboard, report and bill preview endpoints."""

from decimal import Decimal

from django.test import override_settings
from django.utils import timezone
from rest_framework.test import APISimpleTestCase

from ..demo import seed_demo_data
from . import line, payment_input, reset_app_store, sale_input


class DashboardSummaryTest(APISimpleTestCase):
    """Validate the aggregates computed over the demo data set."""

    def setUp(self):
        self.store = seed_demo_data(reset_app_store())

    def test_dashboard_summary_totals(self):
        response = self.client.get("/api/dashboard/summary/")
        self.assertEqual(response.status_code, 200)
        data = response.data
        self.assertEqual(data["total_sales"], Decimal("17050.00"))
        self.assertEqual(data["total_purchases"], Decimal("0.00"))
        self.assertEqual(data["gross_profit"], Decimal("17050.00"))
        self.assertEqual(data["total_receivables"], Decimal("1350.00"))
        self.assertEqual(data["payments_received"], Decimal("3000.00"))
        self.assertEqual(data["customer_count"], 2)
        self.assertEqual(
            data["monthly"],
            [{"month": "2024-06", "sales": Decimal("17050.00"), "purchases": Decimal("0.00")}],
        )

    def test_recent_transactions_are_newest_first(self):
        recent = self.client.get("/api/dashboard/summary/").data["recent_transactions"]
        self.assertEqual([entry["id"] for entry in recent], ["INV-002", "INV-001"])
        self.assertEqual(recent[0]["party"], "ABC Corporation")
        self.assertEqual(recent[0]["type"], "sale")

    @override_settings(BIZMANAGER={"RECENT_TRANSACTIONS_LIMIT": 1})
    def test_recent_transactions_limit_is_configurable(self):
        recent = self.client.get("/api/dashboard/summary/").data["recent_transactions"]
        self.assertEqual(len(recent), 1)

    def test_receivables_ignore_negative_balances(self):
        # Deleting ABC's sale leaves the later 3000 payment unmatched.
        self.store.delete_sale("INV-002")
        self.assertEqual(self.store.get_customer("CUST-001").outstanding_balance, Decimal("-3000.00"))

        data = self.client.get("/api/dashboard/summary/").data
        self.assertEqual(data["total_receivables"], Decimal("0.00"))
        self.assertEqual(data["total_sales"], Decimal("7700.00"))


class BillPreviewTest(APISimpleTestCase):
    def test_bill_preview_adds_tax(self):
        response = self.client.post(
            "/api/bills/preview/",
            {
                "items": [
                    {"description": "Rice", "quantity": 2, "rate": "100"},
                    {"description": "Oil", "quantity": 1, "rate": "50.50"},
                ]
            },
            format="json",
        )
        self.assertEqual(response.status_code, 200, response.content)
        self.assertEqual(response.data["subtotal"], Decimal("250.50"))
        self.assertEqual(response.data["tax"], Decimal("25.05"))
        self.assertEqual(response.data["total"], Decimal("275.55"))
        self.assertEqual(response.data["items"][1]["amount"], Decimal("50.50"))

    @override_settings(BIZMANAGER={"TAX_RATE": "0.05"})
    def test_tax_rate_comes_from_settings(self):
        response = self.client.post(
            "/api/bills/preview/",
            {"items": [{"description": "Rice", "quantity": 1, "rate": "200"}]},
            format="json",
        )
        self.assertEqual(response.data["tax"], Decimal("10.00"))
        self.assertEqual(response.data["total"], Decimal("210.00"))


class ReconciliationAPITest(APISimpleTestCase):
    def setUp(self):
        self.store = reset_app_store()
        self.customer = self.store.create_customer(name="Alice")
        self.store.create_sale(sale_input(self.customer.id, items=[line(1, 1000)]))

    def test_consistent_ledger(self):
        response = self.client.get("/api/reports/reconciliation/")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["consistent"])
        self.assertEqual(response.data["customers"][0]["expected_balance"], "1000.00")

    def test_drift_is_reported_and_repaired(self):
        payment = self.store.create_payment(payment_input(self.customer.id, amount="1500"))
        self.store.delete_payment(payment.id)

        with self.assertLogs("bizmanager.store", level="WARNING"):
            report = self.client.get("/api/reports/reconciliation/").data
        self.assertFalse(report["consistent"])
        self.assertEqual(report["customers"][0]["balance_drift"], "500.00")

        repaired = self.client.post("/api/reports/reconciliation/").data["repaired"]
        self.assertEqual([row["customer_id"] for row in repaired], [self.customer.id])
        self.assertEqual(self.store.get_customer(self.customer.id).outstanding_balance, Decimal("1000.00"))
        self.assertTrue(self.client.get("/api/reports/reconciliation/").data["consistent"])


class InventoryAPITest(APISimpleTestCase):
    def setUp(self):
        seed_demo_data(reset_app_store())

    def test_filter_by_category(self):
        response = self.client.get("/api/inventory/", {"category": "Electronics"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 3)
        self.assertEqual(response.data[2]["stock_status"], "low")
        self.assertEqual(response.data[0]["total_value"], "4500.00")

    def test_all_category_and_search(self):
        self.assertEqual(len(self.client.get("/api/inventory/", {"category": "all"}).data), 5)
        self.assertEqual(len(self.client.get("/api/inventory/", {"search": "component"}).data), 1)

    def test_summary(self):
        data = self.client.get("/api/inventory/summary/").data
        self.assertEqual(data["total_items"], 5)
        self.assertEqual(data["total_units"], 301)
        self.assertEqual(data["total_value"], Decimal("15575.00"))
        self.assertEqual(data["low_stock_count"], 1)


class PurchaseAndProductAPITest(APISimpleTestCase):
    def setUp(self):
        self.store = reset_app_store()

    def test_create_purchase(self):
        response = self.client.post(
            "/api/purchases/",
            {
                "supplier": "XYZ Supplies",
                "items": [
                    {"name": "Rice", "quantity": 2, "unit_price": "100"},
                    {"name": "Oil", "quantity": 1, "unit_price": "50"},
                ],
            },
            format="json",
        )
        self.assertEqual(response.status_code, 201, response.content)
        self.assertEqual(response.data["id"], "PUR-001")
        self.assertEqual(response.data["tax"], "25.00")
        self.assertEqual(response.data["total"], "275.00")
        self.assertEqual(response.data["status"], "pending")

        dashboard = self.client.get("/api/dashboard/summary/").data
        self.assertEqual(dashboard["total_purchases"], Decimal("275.00"))

    def test_purchases_cannot_be_edited(self):
        response = self.client.put("/api/purchases/PUR-001/", {"supplier": "x"}, format="json")
        self.assertEqual(response.status_code, 405)

    def test_product_catalog_crud(self):
        response = self.client.post("/api/products/", {"name": "Sugar", "size": "1kg", "rate": "45"}, format="json")
        self.assertEqual(response.status_code, 201, response.content)
        self.assertEqual(response.data["id"], "PROD-001")
        self.assertEqual(response.data["rate"], "45.00")

        response = self.client.patch("/api/products/PROD-001/", {"rate": "50"}, format="json")
        self.assertEqual(response.data["rate"], "50.00")

        self.assertEqual(self.client.delete("/api/products/PROD-001/").status_code, 204)
        self.assertEqual(self.client.get("/api/products/").data, [])


class ActivityAPITest(APISimpleTestCase):
    def setUp(self):
        self.store = reset_app_store()
        self.store.create_customer(name="Alice")

    def test_activity_log_is_newest_first(self):
        self.store.create_sale(sale_input("CUST-001", items=[line(1, 10)]))
        response = self.client.get("/api/activities/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([row["entity"] for row in response.data], ["Sale", "Customer"])

    def test_filter_by_date(self):
        today = timezone.now().date().isoformat()
        self.assertEqual(len(self.client.get("/api/activities/", {"date": today}).data), 1)
        self.assertEqual(self.client.get("/api/activities/", {"date": "2000-01-01"}).data, [])
        self.assertEqual(self.client.get("/api/activities/", {"date": "yesterday"}).status_code, 400)
