# accounting/adapters/__init__.py

"""
Document-to-ledger adapters: typed snapshots + pure line builders.
"""

from accounting.adapters.documents import (
    AssetAcquisitionSnapshot,
    AssetDisposalSnapshot,
    BillLine,
    BillPaymentSnapshot,
    BillSnapshot,
    DepreciationRunItem,
    DepreciationRunSnapshot,
    DocumentSnapshotError,
    ExpenseSnapshot,
    InventoryIssueSnapshot,
    InvoiceLine,
    InvoicePaymentSnapshot,
    InvoiceSnapshot,
)
from accounting.adapters.lines import (
    build_lines_for_asset_acquisition,
    build_lines_for_asset_disposal,
    build_lines_for_bill_approval,
    build_lines_for_bill_payment,
    build_lines_for_depreciation_run,
    build_lines_for_expense,
    build_lines_for_inventory_issue,
    build_lines_for_invoice_issuance,
    build_lines_for_invoice_payment,
)

__all__ = [
    "AssetAcquisitionSnapshot",
    "AssetDisposalSnapshot",
    "BillLine",
    "BillPaymentSnapshot",
    "BillSnapshot",
    "DepreciationRunItem",
    "DepreciationRunSnapshot",
    "DocumentSnapshotError",
    "ExpenseSnapshot",
    "InventoryIssueSnapshot",
    "InvoiceLine",
    "InvoicePaymentSnapshot",
    "InvoiceSnapshot",
    "build_lines_for_asset_acquisition",
    "build_lines_for_asset_disposal",
    "build_lines_for_bill_approval",
    "build_lines_for_bill_payment",
    "build_lines_for_depreciation_run",
    "build_lines_for_expense",
    "build_lines_for_inventory_issue",
    "build_lines_for_invoice_issuance",
    "build_lines_for_invoice_payment",
]
