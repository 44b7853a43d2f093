# accounting/tests/test_adapters.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase, override_settings

from accounting.adapters import (
    AssetDisposalSnapshot,
    BillLine,
    BillSnapshot,
    DepreciationRunItem,
    DepreciationRunSnapshot,
    DocumentSnapshotError,
    ExpenseSnapshot,
    InvoiceLine,
    InvoiceSnapshot,
    build_lines_for_asset_disposal,
    build_lines_for_bill_approval,
    build_lines_for_depreciation_run,
    build_lines_for_expense,
    build_lines_for_invoice_issuance,
)
from accounting.services.exceptions import PostingRuleError


def _as_rows(lines):
    return [
        (line.account_code, "D" if line.debit else "C", Decimal(line.debit or line.credit), line.open_item)
        for line in lines
    ]


class InvoiceAdapterTests(SimpleTestCase):
    """
    GUARANTEES:
    - AR carries the invoice total on the invoice's open item
    - Revenue is credited per account, tax to Tax Payable
    """

    def test_invoice_with_tax(self):
        snapshot = InvoiceSnapshot(
            invoice_id="INV-1",
            invoice_date=date(2024, 3, 1),
            customer_name="Acme Ltd",
            lines=(InvoiceLine(amount="1000.00", tax_amount="62.50"),),
        )

        rows = _as_rows(build_lines_for_invoice_issuance(snapshot))

        self.assertEqual(
            rows,
            [
                ("1200", "D", Decimal("1062.50"), "invoice:INV-1"),
                ("4100", "C", Decimal("1000.00"), ""),
                ("2200", "C", Decimal("62.50"), ""),
            ],
        )

    def test_lines_on_same_revenue_account_are_merged(self):
        snapshot = InvoiceSnapshot(
            invoice_id="INV-2",
            invoice_date=date(2024, 3, 1),
            customer_name="Acme Ltd",
            lines=(
                InvoiceLine(amount="40.00"),
                InvoiceLine(amount="60.00"),
                InvoiceLine(amount="25.00", revenue_account_code="4200"),
            ),
        )

        rows = _as_rows(build_lines_for_invoice_issuance(snapshot))

        self.assertEqual(
            rows,
            [
                ("1200", "D", Decimal("125.00"), "invoice:INV-2"),
                ("4100", "C", Decimal("100.00"), ""),
                ("4200", "C", Decimal("25.00"), ""),
            ],
        )

    @override_settings(ACCOUNTING_ACCOUNT_CODES={"SALES_REVENUE": "4200"})
    def test_role_overrides_come_from_settings(self):
        snapshot = InvoiceSnapshot(
            invoice_id="INV-3",
            invoice_date=date(2024, 3, 1),
            customer_name="Acme Ltd",
            lines=(InvoiceLine(amount="10.00"),),
        )

        rows = _as_rows(build_lines_for_invoice_issuance(snapshot))

        self.assertEqual(rows[1][0], "4200")

    def test_zero_total_invoice_is_rejected(self):
        with self.assertRaises(DocumentSnapshotError):
            InvoiceSnapshot(
                invoice_id="INV-0",
                invoice_date=date(2024, 3, 1),
                customer_name="Acme Ltd",
                lines=(InvoiceLine(amount="0"),),
            )

    def test_negative_and_fractional_inputs_are_rejected(self):
        with self.assertRaises(DocumentSnapshotError):
            InvoiceLine(amount="-5.00")
        with self.assertRaises(DocumentSnapshotError):
            InvoiceLine(amount="5.00", quantity="1.5")
        with self.assertRaises(DocumentSnapshotError):
            InvoiceSnapshot(invoice_id=" ", invoice_date=date(2024, 3, 1), customer_name="", lines=())


class BillAdapterTests(SimpleTestCase):
    def test_stock_and_expense_lines(self):
        snapshot = BillSnapshot(
            bill_id="B-1",
            bill_date=date(2024, 3, 2),
            vendor_name="Supplier Co",
            lines=(
                BillLine(quantity=10, unit_cost="5.00", product_id="p-1", inventory_category="physical_stock"),
                BillLine(quantity=1, unit_cost="30.00", expense_account_code="6200", tax_amount="2.40"),
            ),
        )

        rows = _as_rows(build_lines_for_bill_approval(snapshot))

        self.assertEqual(
            rows,
            [
                ("1300", "D", Decimal("50.00"), ""),
                ("6200", "D", Decimal("32.40"), ""),
                ("2000", "C", Decimal("82.40"), "bill:B-1"),
            ],
        )

    def test_non_stock_lines_default_to_cogs(self):
        snapshot = BillSnapshot(
            bill_id="B-2",
            bill_date=date(2024, 3, 2),
            vendor_name="Supplier Co",
            lines=(BillLine(quantity=2, unit_cost="7.50", product_id="p-9", inventory_category="service"),),
        )

        rows = _as_rows(build_lines_for_bill_approval(snapshot))

        self.assertEqual(rows[0], ("5100", "D", Decimal("15.00"), ""))

    def test_stocked_line_needs_quantity(self):
        with self.assertRaises(DocumentSnapshotError):
            BillLine(quantity=0, unit_cost="5.00", product_id="p-1", inventory_category="physical_stock")


class ExpenseAdapterTests(SimpleTestCase):
    def test_amount_plus_tax(self):
        snapshot = ExpenseSnapshot(
            expense_id="E-1",
            expense_date=date(2024, 3, 3),
            amount="100.00",
            tax_amount="7.50",
            expense_account_code="6200",
            payment_account_code="1000",
            payee="Stationers",
        )

        rows = _as_rows(build_lines_for_expense(snapshot))

        self.assertEqual(rows, [("6200", "D", Decimal("107.50"), ""), ("1000", "C", Decimal("107.50"), "")])

    def test_same_account_on_both_sides_is_rejected(self):
        snapshot = ExpenseSnapshot(
            expense_id="E-2",
            expense_date=date(2024, 3, 3),
            amount="10.00",
            expense_account_code="1000",
            payment_account_code="1000",
        )
        with self.assertRaises(PostingRuleError):
            build_lines_for_expense(snapshot)


class FixedAssetAdapterTests(SimpleTestCase):
    def test_depreciation_run_merges_per_account(self):
        snapshot = DepreciationRunSnapshot(
            run_id="2024-01-31",
            period_end=date(2024, 1, 31),
            items=(
                DepreciationRunItem(asset_id="1", asset_name="Van", amount="200.00"),
                DepreciationRunItem(asset_id="2", asset_name="Laptop", amount="50.00"),
                DepreciationRunItem(asset_id="3", asset_name="Desk", amount="0"),
            ),
        )

        rows = _as_rows(build_lines_for_depreciation_run(snapshot))

        self.assertEqual(rows, [("6500", "D", Decimal("250.00"), ""), ("1590", "C", Decimal("250.00"), "")])

    def test_empty_run_is_rejected(self):
        snapshot = DepreciationRunSnapshot(run_id="r", period_end=date(2024, 1, 31), items=())
        with self.assertRaises(PostingRuleError):
            build_lines_for_depreciation_run(snapshot)

    def test_disposal_with_gain(self):
        snapshot = AssetDisposalSnapshot(
            asset_id="1",
            asset_name="Van",
            disposal_date=date(2024, 6, 30),
            cost="12000.00",
            accumulated_depreciation="4000.00",
            proceeds="9000.00",
        )

        rows = _as_rows(build_lines_for_asset_disposal(snapshot))

        self.assertEqual(
            rows,
            [
                ("1000", "D", Decimal("9000.00"), ""),
                ("1590", "D", Decimal("4000.00"), ""),
                ("1500", "C", Decimal("12000.00"), ""),
                ("4900", "C", Decimal("1000.00"), ""),
            ],
        )

    def test_disposal_with_loss_and_no_proceeds(self):
        snapshot = AssetDisposalSnapshot(
            asset_id="1",
            asset_name="Van",
            disposal_date=date(2024, 6, 30),
            cost="12000.00",
            accumulated_depreciation="4000.00",
        )

        rows = _as_rows(build_lines_for_asset_disposal(snapshot))

        self.assertEqual(
            rows,
            [
                ("1590", "D", Decimal("4000.00"), ""),
                ("1500", "C", Decimal("12000.00"), ""),
                ("8920", "D", Decimal("8000.00"), ""),
            ],
        )

    def test_accumulated_cannot_exceed_cost(self):
        with self.assertRaises(DocumentSnapshotError):
            AssetDisposalSnapshot(
                asset_id="1",
                asset_name="Van",
                disposal_date=date(2024, 6, 30),
                cost="100.00",
                accumulated_depreciation="100.01",
            )
