# accounting/tests/test_document_posting.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.adapters import (
    BillLine,
    BillPaymentSnapshot,
    BillSnapshot,
    ExpenseSnapshot,
    InventoryIssueSnapshot,
    InvoiceLine,
    InvoicePaymentSnapshot,
    InvoiceSnapshot,
)
from accounting.models.journal import JournalEntry
from accounting.services.balance_service import get_account_balance
from accounting.services.chart_registry import deactivate_account
from accounting.services.document_posting import (
    BILL,
    INVOICE,
    INVOICE_COGS,
    approve_bill,
    find_entry_for_document,
    issue_inventory,
    issue_invoice,
    record_bill_payment,
    record_expense,
    record_invoice_payment,
    reverse_inventory_issue,
    void_bill,
    void_invoice,
)
from accounting.services.exceptions import ClosedPeriodError, NotPostedError, PostingRuleError
from accounting.services.period_service import close_period, get_period_for_date
from accounting.services.trial_balance_service import get_trial_balance
from accounting.tests.utils import seed_ledger
from inventory.models import InventoryCostLayer, InventoryMovement, Product
from inventory.services.fifo_costing import CostLayerConsumedError, InsufficientStockError, quantity_on_hand


def _invoice(invoice_id="INV-100", amount="1000.00", tax="62.50", **line_kwargs):
    return InvoiceSnapshot(
        invoice_id=invoice_id,
        invoice_date=date(2024, 3, 15),
        customer_name="Acme Ltd",
        lines=(InvoiceLine(amount=amount, tax_amount=tax, **line_kwargs),),
        due_date=date(2024, 4, 14),
        number=invoice_id,
    )


def _stock_bill(product, bill_id="BILL-1", quantity=10, unit_cost="5.00", bill_date=date(2024, 3, 1)):
    return BillSnapshot(
        bill_id=bill_id,
        bill_date=bill_date,
        vendor_name="Supplier Co",
        lines=(
            BillLine(
                quantity=quantity,
                unit_cost=unit_cost,
                product_id=str(product.id),
                inventory_category=product.inventory_category,
            ),
        ),
    )


class InvoicePostingTests(TestCase):
    """
    GUARANTEES:
    - Invoice issuance posts AR / Revenue / Tax exactly once per invoice
    - Stocked lines relieve inventory at FIFO cost in a separate COGS entry
    - Voiding reverses both entries and restores the units
    - A replay returns the stored entry even once its period is closed
    """

    def setUp(self):
        seed_ledger(2024)
        self.product = Product.objects.create(sku="SKU-1", name="Widget")

    def test_invoice_with_tax_posts_balanced_lines(self):
        entry = issue_invoice(_invoice())

        lines = {(line.account.code, line.entry_type): line.amount for line in entry.lines.select_related("account")}
        self.assertEqual(
            lines,
            {
                ("1200", "DEBIT"): Decimal("1062.50"),
                ("4100", "CREDIT"): Decimal("1000.00"),
                ("2200", "CREDIT"): Decimal("62.50"),
            },
        )
        self.assertEqual(entry.counterparty, "Acme Ltd")
        self.assertEqual(entry.due_date, date(2024, 4, 14))
        self.assertTrue(get_trial_balance(as_of=date(2024, 3, 31))["totals"]["balanced"])

    def test_duplicate_issue_returns_existing_entry(self):
        first = issue_invoice(_invoice())
        second = issue_invoice(_invoice())

        self.assertEqual(first.id, second.id)
        self.assertEqual(JournalEntry.objects.filter(source_type=INVOICE).count(), 1)
        self.assertEqual(get_account_balance("1200"), Decimal("1062.50"))

    def test_closed_period_rejects_invoice_and_writes_nothing(self):
        close_period(get_period_for_date(date(2024, 3, 15)).id)

        with self.assertRaises(ClosedPeriodError):
            issue_invoice(_invoice())

        self.assertFalse(JournalEntry.objects.exists())

    def test_replay_after_period_close_returns_stored_entry(self):
        first = issue_invoice(_invoice())
        close_period(get_period_for_date(date(2024, 3, 15)).id)

        second = issue_invoice(_invoice())

        self.assertEqual(first.id, second.id)
        self.assertEqual(JournalEntry.objects.filter(source_type=INVOICE).count(), 1)

    def test_stocked_line_posts_fifo_cogs(self):
        approve_bill(_stock_bill(self.product, "B-1", 10, "5.00", date(2024, 3, 1)))
        approve_bill(_stock_bill(self.product, "B-2", 10, "6.00", date(2024, 3, 2)))

        issue_invoice(
            _invoice(
                amount="150.00",
                tax="0",
                product_id=str(self.product.id),
                quantity=15,
                inventory_category="physical_stock",
            )
        )

        cogs = find_entry_for_document(INVOICE_COGS, "INV-100")
        self.assertIsNotNone(cogs)
        self.assertEqual(get_account_balance("5100"), Decimal("80.00"))
        self.assertEqual(get_account_balance("1300"), Decimal("30.00"))
        self.assertEqual(quantity_on_hand(self.product), 5)

    def test_replayed_invoice_does_not_issue_stock_twice(self):
        approve_bill(_stock_bill(self.product))
        invoice = _invoice(
            amount="40.00", tax="0", product_id=str(self.product.id), quantity=4, inventory_category="physical_stock"
        )

        issue_invoice(invoice)
        issue_invoice(invoice)

        self.assertEqual(quantity_on_hand(self.product), 6)
        self.assertEqual(
            InventoryMovement.objects.filter(source_type=INVOICE, reason=InventoryMovement.Reason.ISSUE).count(),
            1,
        )

    def test_insufficient_stock_rolls_back_invoice(self):
        approve_bill(_stock_bill(self.product, quantity=2))

        with self.assertRaises(InsufficientStockError):
            issue_invoice(
                _invoice(
                    amount="50.00", tax="0", product_id=str(self.product.id), quantity=3, inventory_category="physical_stock"
                )
            )

        self.assertIsNone(find_entry_for_document(INVOICE, "INV-100"))
        self.assertEqual(quantity_on_hand(self.product), 2)

    def test_void_invoice_reverses_entries_and_restores_stock(self):
        approve_bill(_stock_bill(self.product))
        issue_invoice(
            _invoice(
                amount="60.00", tax="0", product_id=str(self.product.id), quantity=6, inventory_category="physical_stock"
            )
        )

        void_invoice("INV-100", date(2024, 3, 20), reason="customer cancelled")

        self.assertEqual(find_entry_for_document(INVOICE, "INV-100").status, JournalEntry.Status.VOID)
        self.assertEqual(find_entry_for_document(INVOICE_COGS, "INV-100").status, JournalEntry.Status.VOID)
        self.assertEqual(get_account_balance("1200"), Decimal("0.00"))
        self.assertEqual(get_account_balance("5100"), Decimal("0.00"))
        self.assertEqual(get_account_balance("1300"), Decimal("50.00"))
        self.assertEqual(quantity_on_hand(self.product), 10)

    def test_void_after_revenue_account_deactivated(self):
        issue_invoice(_invoice(tax="0", revenue_account_code="4200"))
        deactivate_account("4200")

        void_invoice("INV-100", date(2024, 3, 20))

        self.assertEqual(find_entry_for_document(INVOICE, "INV-100").status, JournalEntry.Status.VOID)
        self.assertEqual(get_account_balance("4200"), Decimal("0.00"))
        self.assertEqual(get_account_balance("1200"), Decimal("0.00"))

    def test_payment_settles_receivable(self):
        issue_invoice(_invoice())

        record_invoice_payment(
            InvoicePaymentSnapshot(
                payment_id="PAY-1",
                invoice_id="INV-100",
                payment_date=date(2024, 3, 25),
                amount="1062.50",
            )
        )

        self.assertEqual(get_account_balance("1200"), Decimal("0.00"))
        self.assertEqual(get_account_balance("1010"), Decimal("1062.50"))

    def test_payment_for_unknown_or_void_invoice(self):
        payment = InvoicePaymentSnapshot(
            payment_id="PAY-2", invoice_id="INV-100", payment_date=date(2024, 3, 25), amount="10.00"
        )
        with self.assertRaises(NotPostedError):
            record_invoice_payment(payment)

        issue_invoice(_invoice())
        void_invoice("INV-100", date(2024, 3, 20))

        with self.assertRaises(PostingRuleError):
            record_invoice_payment(payment)


class BillPostingTests(TestCase):
    """
    GUARANTEES:
    - Approval posts Inventory / AP and opens one cost layer per stocked line
    - Void is blocked once any of the bill's units were consumed
    """

    def setUp(self):
        seed_ledger(2024)
        self.product = Product.objects.create(sku="SKU-2", name="Gadget")

    def test_approval_opens_cost_layer(self):
        entry = approve_bill(_stock_bill(self.product))

        lines = {(line.account.code, line.entry_type): line.amount for line in entry.lines.select_related("account")}
        self.assertEqual(lines, {("1300", "DEBIT"): Decimal("50.00"), ("2000", "CREDIT"): Decimal("50.00")})

        layer = InventoryCostLayer.objects.get(source_type=BILL, source_id="BILL-1")
        self.assertEqual(layer.quantity_received, 10)
        self.assertEqual(layer.quantity_remaining, 10)
        self.assertEqual(layer.unit_cost, Decimal("5.00"))

    def test_replayed_approval_opens_no_second_layer(self):
        approve_bill(_stock_bill(self.product))
        approve_bill(_stock_bill(self.product))

        self.assertEqual(InventoryCostLayer.objects.count(), 1)
        self.assertEqual(quantity_on_hand(self.product), 10)

    def test_void_unconsumed_bill(self):
        approve_bill(_stock_bill(self.product))

        void_bill("BILL-1", date(2024, 3, 5))

        self.assertEqual(get_account_balance("1300"), Decimal("0.00"))
        self.assertEqual(get_account_balance("2000"), Decimal("0.00"))
        self.assertEqual(quantity_on_hand(self.product), 0)
        self.assertTrue(InventoryCostLayer.objects.get(source_id="BILL-1").is_voided)

    def test_void_consumed_bill_is_blocked(self):
        approve_bill(_stock_bill(self.product))
        issue_inventory(
            InventoryIssueSnapshot(issue_id="ISS-1", issue_date=date(2024, 3, 3), cost="0"),
            items=[(self.product, 1)],
        )

        with self.assertRaises(CostLayerConsumedError):
            void_bill("BILL-1", date(2024, 3, 5))

        self.assertEqual(find_entry_for_document(BILL, "BILL-1").status, JournalEntry.Status.POSTED)
        self.assertEqual(quantity_on_hand(self.product), 9)

    def test_bill_payment_clears_payable(self):
        approve_bill(_stock_bill(self.product))

        record_bill_payment(
            BillPaymentSnapshot(payment_id="BP-1", bill_id="BILL-1", payment_date=date(2024, 3, 10), amount="50.00")
        )

        self.assertEqual(get_account_balance("2000"), Decimal("0.00"))
        self.assertEqual(get_account_balance("1010"), Decimal("-50.00"))


class ExpenseAndIssueTests(TestCase):
    def setUp(self):
        seed_ledger(2024)
        self.product = Product.objects.create(sku="SKU-3", name="Bolt")

    def test_expense_is_idempotent(self):
        snapshot = ExpenseSnapshot(
            expense_id="EXP-1",
            expense_date=date(2024, 5, 2),
            amount="100.00",
            tax_amount="7.50",
            expense_account_code="6200",
            payment_account_code="1000",
        )

        first = record_expense(snapshot)
        second = record_expense(snapshot)

        self.assertEqual(first.id, second.id)
        self.assertEqual(get_account_balance("6200"), Decimal("107.50"))
        self.assertEqual(get_account_balance("1000"), Decimal("-107.50"))

    def test_issue_and_reverse_inventory(self):
        approve_bill(_stock_bill(self.product, quantity=4, unit_cost="2.50"))

        entry = issue_inventory(
            InventoryIssueSnapshot(issue_id="ISS-9", issue_date=date(2024, 3, 4), cost="0", cogs_account_code="5900"),
            items=[(self.product, 3)],
        )
        self.assertEqual(get_account_balance("5900"), Decimal("7.50"))
        replay = issue_inventory(
            InventoryIssueSnapshot(issue_id="ISS-9", issue_date=date(2024, 3, 4), cost="0"),
            items=[(self.product, 3)],
        )
        self.assertEqual(replay.id, entry.id)
        self.assertEqual(quantity_on_hand(self.product), 1)

        reverse_inventory_issue("ISS-9", date(2024, 3, 6))

        self.assertEqual(get_account_balance("5900"), Decimal("0.00"))
        self.assertEqual(quantity_on_hand(self.product), 4)
