from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from ..exceptions import NotFound, ValidationError
from ..services import ledger
from ..services.totals import derive_status
from . import line, make_customer, payment_input, sale_input


class SaleOperationTests(SimpleTestCase):
    def setUp(self):
        self.customer = make_customer()

    def test_create_sale_unpaid_adds_total_and_outstanding(self):
        sale, customer = ledger.apply_sale_create(
            self.customer,
            sale_input(items=[line(5, 10000)], transport="500"),
            sale_id="INV-001",
            on_date=date(2024, 6, 20),
        )

        self.assertEqual(sale.subtotal, Decimal("50000.00"))
        self.assertEqual(sale.total, Decimal("50500.00"))
        self.assertEqual(sale.outstanding_amount, Decimal("50500.00"))
        self.assertEqual(sale.status, "unpaid")
        self.assertEqual(customer.outstanding_balance, Decimal("50500.00"))
        self.assertEqual(customer.total_purchases, Decimal("50500.00"))

    def test_create_does_not_mutate_the_input_customer(self):
        ledger.apply_sale_create(
            self.customer, sale_input(items=[line(1, 100)]), sale_id="INV-001"
        )
        self.assertEqual(self.customer.outstanding_balance, Decimal("0"))
        self.assertEqual(self.customer.total_purchases, Decimal("0"))

    def test_sale_snapshots_customer_name_and_email(self):
        sale, _ = ledger.apply_sale_create(
            self.customer, sale_input(items=[line(1, 100)]), sale_id="INV-001"
        )
        self.assertEqual(sale.customer_name, "Alice")
        self.assertEqual(sale.customer_email, "alice@example.com")

    def test_empty_items_total_is_transport(self):
        sale, customer = ledger.apply_sale_create(
            self.customer,
            sale_input(items=[], transport="300", paid_amount="100"),
            sale_id="INV-001",
        )
        self.assertEqual(sale.subtotal, Decimal("0.00"))
        self.assertEqual(sale.total, Decimal("300.00"))
        self.assertEqual(sale.outstanding_amount, Decimal("200.00"))
        self.assertEqual(sale.status, "partial")
        self.assertEqual(customer.outstanding_balance, Decimal("200.00"))

    def test_all_zero_quantities_do_not_raise(self):
        sale, customer = ledger.apply_sale_create(
            self.customer,
            sale_input(items=[line(0, 999), line(0, 5)]),
            sale_id="INV-001",
        )
        self.assertEqual(sale.total, Decimal("0.00"))
        self.assertEqual(sale.status, "paid")
        self.assertEqual(customer.total_purchases, Decimal("0.00"))

    def test_missing_customer_raises_not_found(self):
        with self.assertRaises(NotFound):
            ledger.apply_sale_create(None, sale_input(items=[line(1, 10)]), sale_id="INV-001")

    def test_negative_quantity_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            ledger.apply_sale_create(self.customer, sale_input(items=[line(-1, 10)]), sale_id="INV-001")
        self.assertEqual(ctx.exception.field, "items")

    def test_negative_transport_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            ledger.apply_sale_create(self.customer, sale_input(transport="-5"), sale_id="INV-001")
        self.assertEqual(ctx.exception.field, "transport")

    def test_paid_amount_above_total_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            ledger.apply_sale_create(
                self.customer, sale_input(items=[line(1, 100)], paid_amount="150"), sale_id="INV-001"
            )
        self.assertEqual(ctx.exception.field, "paid_amount")

    def test_edit_same_customer_applies_differences(self):
        sale, customer = ledger.apply_sale_create(
            self.customer, sale_input(items=[line(2, 100)], paid_amount="50"), sale_id="INV-001"
        )
        edited, customer, other = ledger.apply_sale_edit(
            sale, sale_input(items=[line(3, 100)], transport="20", paid_amount="100"), customer
        )

        self.assertIsNone(other)
        self.assertEqual(edited.id, "INV-001")
        self.assertEqual(edited.total, Decimal("320.00"))
        self.assertEqual(edited.outstanding_amount, Decimal("220.00"))
        self.assertEqual(customer.total_purchases, Decimal("320.00"))
        self.assertEqual(customer.outstanding_balance, Decimal("220.00"))

    def test_edit_keeps_original_snapshot(self):
        sale, customer = ledger.apply_sale_create(
            self.customer, sale_input(items=[line(1, 100)]), sale_id="INV-001"
        )
        renamed = make_customer(name="Alicia", total_purchases=customer.total_purchases,
                                outstanding_balance=customer.outstanding_balance)
        edited, _, _ = ledger.apply_sale_edit(sale, sale_input(items=[line(2, 100)]), renamed)
        self.assertEqual(edited.customer_name, "Alice")

    def test_edit_moving_sale_adjusts_both_customers(self):
        bob = make_customer("CUST-002", "Bob")
        sale, alice = ledger.apply_sale_create(
            self.customer, sale_input(items=[line(10, 100)], paid_amount="200"), sale_id="INV-001"
        )

        edited, alice, bob = ledger.apply_sale_edit(
            sale, sale_input("CUST-002", items=[line(3, 500)]), alice, bob
        )

        self.assertEqual(alice.total_purchases, Decimal("0.00"))
        self.assertEqual(alice.outstanding_balance, Decimal("0.00"))
        self.assertEqual(bob.total_purchases, Decimal("1500.00"))
        self.assertEqual(bob.outstanding_balance, Decimal("1500.00"))
        self.assertEqual(edited.customer_id, "CUST-002")
        self.assertEqual(edited.customer_name, "Bob")

    def test_edit_moving_sale_to_unknown_customer_raises(self):
        sale, alice = ledger.apply_sale_create(
            self.customer, sale_input(items=[line(1, 100)]), sale_id="INV-001"
        )
        with self.assertRaises(NotFound):
            ledger.apply_sale_edit(sale, sale_input("CUST-404", items=[line(1, 100)]), alice, None)

    def test_delete_reverses_sale_without_clamping(self):
        sale, customer = ledger.apply_sale_create(
            self.customer, sale_input(items=[line(1, 1000)]), sale_id="INV-001"
        )
        payment, customer = ledger.apply_payment_create(
            customer, payment_input(amount="1000"), payment_id="PAY-001"
        )
        customer = ledger.apply_sale_delete(sale, customer)

        self.assertEqual(customer.total_purchases, Decimal("0.00"))
        self.assertEqual(customer.outstanding_balance, Decimal("-1000.00"))
        self.assertEqual(customer.display_balance, Decimal("0.00"))
        self.assertEqual(customer.balance_status, "we_owe_them")


class PaymentOperationTests(SimpleTestCase):
    def setUp(self):
        sale, self.customer = ledger.apply_sale_create(
            make_customer(),
            sale_input(items=[line(5, 10000)], transport="500"),
            sale_id="INV-001",
        )

    def test_payment_reduces_balance(self):
        payment, customer = ledger.apply_payment_create(
            self.customer, payment_input(amount="20000", payment_method="upi"), payment_id="PAY-001"
        )
        self.assertEqual(customer.outstanding_balance, Decimal("30500.00"))
        self.assertEqual(customer.total_purchases, Decimal("50500.00"))
        self.assertEqual(payment.customer_name, "Alice")
        self.assertEqual(payment.payment_method, "upi")

    def test_over_payment_clamps_at_zero(self):
        _, customer = ledger.apply_payment_create(
            self.customer, payment_input(amount="20000"), payment_id="PAY-001"
        )
        _, customer = ledger.apply_payment_create(
            customer, payment_input(amount="40000"), payment_id="PAY-002"
        )
        self.assertEqual(customer.outstanding_balance, Decimal("0.00"))

    def test_delete_restores_balance(self):
        payment, customer = ledger.apply_payment_create(
            self.customer, payment_input(amount="20000"), payment_id="PAY-001"
        )
        customer = ledger.apply_payment_delete(payment, customer)
        self.assertEqual(customer.outstanding_balance, Decimal("50500.00"))

    def test_edit_applies_difference(self):
        payment, customer = ledger.apply_payment_create(
            self.customer, payment_input(amount="20000"), payment_id="PAY-001"
        )
        edited, customer = ledger.apply_payment_edit(
            payment, payment_input(amount="25000", notes="corrected"), customer
        )
        self.assertEqual(edited.id, "PAY-001")
        self.assertEqual(edited.notes, "corrected")
        self.assertEqual(customer.outstanding_balance, Decimal("25500.00"))

    def test_edit_clamps_at_zero(self):
        payment, customer = ledger.apply_payment_create(
            self.customer, payment_input(amount="50000"), payment_id="PAY-001"
        )
        _, customer = ledger.apply_payment_edit(payment, payment_input(amount="60000"), customer)
        self.assertEqual(customer.outstanding_balance, Decimal("0.00"))

    def test_edit_cannot_change_customer(self):
        payment, customer = ledger.apply_payment_create(
            self.customer, payment_input(amount="100"), payment_id="PAY-001"
        )
        with self.assertRaises(ValidationError):
            ledger.apply_payment_edit(payment, payment_input("CUST-002", amount="100"), customer)

    def test_non_positive_amount_is_rejected(self):
        for amount in ("0", "-10"):
            with self.subTest(amount=amount):
                with self.assertRaises(ValidationError) as ctx:
                    ledger.apply_payment_create(
                        self.customer, payment_input(amount=amount), payment_id="PAY-001"
                    )
                self.assertEqual(ctx.exception.field, "amount")

    def test_unknown_method_is_rejected(self):
        with self.assertRaises(ValidationError):
            ledger.apply_payment_create(
                self.customer, payment_input(amount="10", payment_method="bitcoin"), payment_id="PAY-001"
            )

    def test_missing_customer_raises_not_found(self):
        with self.assertRaises(NotFound):
            ledger.apply_payment_create(None, payment_input(amount="10"), payment_id="PAY-001")


class SaleStatusTests(SimpleTestCase):
    def test_status_derivation(self):
        cases = [
            ("100", "0", "unpaid"),
            ("100", "40", "partial"),
            ("100", "100", "paid"),
            ("100", "120", "paid"),
            ("0", "0", "paid"),
        ]
        for total, paid, expected in cases:
            with self.subTest(total=total, paid=paid):
                self.assertEqual(derive_status(Decimal(total), Decimal(paid)), expected)

    def test_recomputing_totals_is_idempotent(self):
        draft = sale_input(items=[line(3, "19.99"), line(2, "0.50")], transport="7.25", paid_amount="10")
        self.assertEqual(ledger.sale_totals(draft), ledger.sale_totals(draft))
        self.assertEqual(ledger.sale_totals(draft).total, Decimal("68.22"))


class AmountRangeTests(SimpleTestCase):
    def test_unrepresentable_amount_is_rejected(self):
        customer = make_customer()
        with self.assertRaises(ValidationError):
            ledger.apply_sale_create(customer, sale_input(items=[line(1, "1e40")]), sale_id="INV-001")
        with self.assertRaises(ValidationError):
            ledger.apply_sale_create(customer, sale_input(transport="1e30"), sale_id="INV-001")
