# accounting/adapters/lines.py

"""
======================================================
PATH: accounting/adapters/lines.py
======================================================
DOCUMENT -> LEDGER LINE BUILDERS

Each builder is a pure function: (snapshot, codes=None) -> list[CandidateLine]
- No DB access (account roles resolve through the role->code mapping)
- Balanced by construction; _ensure_balanced() re-checks before returning
- Lines for the same account are merged (stable order) so entries stay compact

Mappings:
- Invoice issuance : Dr AR (total) / Cr Revenue per account / Cr Tax Payable
- Invoice payment  : Dr Cash-Bank / Cr AR
- Bill approval    : Dr Inventory or Expense (cost + tax) / Cr AP (total)
- Bill payment     : Dr AP / Cr pay-from account
- Expense          : Dr Expense / Cr payment account (amount + tax)
- Depreciation run : Dr Depreciation Expense / Cr Accumulated Depreciation per asset
- Inventory issue  : Dr COGS / Cr Inventory
- Asset acquisition: Dr Fixed Assets / Cr funding account
- Asset disposal   : Dr proceeds + Accumulated Depreciation / Cr Asset cost,
                     gain (Cr) or loss (Dr) for the difference
"""

from __future__ import annotations

from collections import OrderedDict
from decimal import Decimal

from accounting.adapters.documents import (
    AssetAcquisitionSnapshot,
    AssetDisposalSnapshot,
    BillPaymentSnapshot,
    BillSnapshot,
    DepreciationRunSnapshot,
    ExpenseSnapshot,
    InventoryIssueSnapshot,
    InvoicePaymentSnapshot,
    InvoiceSnapshot,
)
from accounting.services.chart_registry import account_codes, code_for
from accounting.services.entry_validator import CandidateLine
from accounting.services.exceptions import PostingRuleError
from accounting.services.money import ZERO, money, to_minor


def _codes(codes: dict | None) -> dict:
    return codes if codes is not None else account_codes()


def _merge(postings: list[tuple[str, str, Decimal, str, str]]) -> list[CandidateLine]:
    """
    postings: (code, side "D"/"C", amount, description, open_item)
    Merge by (code, side, open_item); zero amounts are dropped.
    """
    merged: "OrderedDict[tuple[str, str, str], list]" = OrderedDict()
    for code, side, amount, description, open_item in postings:
        amt = money(amount)
        if amt == ZERO:
            continue
        key = (code, side, open_item)
        if key in merged:
            merged[key][0] += amt
        else:
            merged[key] = [amt, description]

    lines = []
    for (code, side, open_item), (amount, description) in merged.items():
        if side == "D":
            lines.append(CandidateLine(account_code=code, debit=amount, description=description, open_item=open_item))
        else:
            lines.append(CandidateLine(account_code=code, credit=amount, description=description, open_item=open_item))
    return lines


def _ensure_balanced(lines: list[CandidateLine], label: str) -> list[CandidateLine]:
    debits = sum(to_minor(line.debit) for line in lines if line.debit)
    credits = sum(to_minor(line.credit) for line in lines if line.credit)
    if debits != credits:
        raise PostingRuleError(f"{label} produced unbalanced lines: debits={debits} credits={credits} (minor units)")
    if len(lines) < 2:
        raise PostingRuleError(f"{label} produced fewer than two lines")
    return lines


# ============================================================
# INVOICES
# ============================================================

def build_lines_for_invoice_issuance(snapshot: InvoiceSnapshot, codes: dict | None = None) -> list[CandidateLine]:
    c = _codes(codes)
    label = snapshot.number or snapshot.invoice_id
    postings = [
        (code_for("AR", c), "D", snapshot.total, f"Invoice {label} - {snapshot.customer_name}", snapshot.open_item),
    ]

    for line in snapshot.lines:
        revenue_code = line.revenue_account_code or code_for("SALES_REVENUE", c)
        postings.append((revenue_code, "C", line.amount, f"Revenue - invoice {label}", ""))

    if snapshot.tax_total > ZERO:
        postings.append((code_for("TAX_PAYABLE", c), "C", snapshot.tax_total, f"Sales tax - invoice {label}", ""))

    return _ensure_balanced(_merge(postings), "Invoice issuance")


def build_lines_for_invoice_payment(snapshot: InvoicePaymentSnapshot, codes: dict | None = None) -> list[CandidateLine]:
    c = _codes(codes)
    deposit = snapshot.deposit_account_code or code_for("BANK", c)
    open_item = f"invoice:{snapshot.invoice_id}"
    postings = [
        (deposit, "D", snapshot.amount, f"Payment received - {snapshot.customer_name or snapshot.invoice_id}", ""),
        (code_for("AR", c), "C", snapshot.amount, f"Payment against invoice {snapshot.invoice_id}", open_item),
    ]
    return _ensure_balanced(_merge(postings), "Invoice payment")


# ============================================================
# BILLS
# ============================================================

def build_lines_for_bill_approval(snapshot: BillSnapshot, codes: dict | None = None) -> list[CandidateLine]:
    c = _codes(codes)
    label = snapshot.number or snapshot.bill_id
    postings = []
    for line in snapshot.lines:
        if line.is_stocked:
            debit_code = code_for("INVENTORY", c)
            description = f"Inventory received - bill {label}"
        else:
            debit_code = line.expense_account_code or code_for("COGS", c)
            description = line.description or f"Bill {label}"
        postings.append((debit_code, "D", line.line_total, description, ""))

    postings.append(
        (code_for("AP", c), "C", snapshot.total, f"Bill {label} - {snapshot.vendor_name}", snapshot.open_item)
    )
    return _ensure_balanced(_merge(postings), "Bill approval")


def build_lines_for_bill_payment(snapshot: BillPaymentSnapshot, codes: dict | None = None) -> list[CandidateLine]:
    c = _codes(codes)
    pay_from = snapshot.pay_from_account_code or code_for("BANK", c)
    postings = [
        (code_for("AP", c), "D", snapshot.amount, f"Payment of bill {snapshot.bill_id}", f"bill:{snapshot.bill_id}"),
        (pay_from, "C", snapshot.amount, f"Bill payment - {snapshot.vendor_name or snapshot.bill_id}", ""),
    ]
    return _ensure_balanced(_merge(postings), "Bill payment")


# ============================================================
# EXPENSES
# ============================================================

def build_lines_for_expense(snapshot: ExpenseSnapshot, codes: dict | None = None) -> list[CandidateLine]:
    if snapshot.expense_account_code == snapshot.payment_account_code:
        raise PostingRuleError("Expense account and payment account must differ")

    description = snapshot.description or f"Expense {snapshot.expense_id}"
    if snapshot.payee:
        description = f"{description} - {snapshot.payee}"

    postings = [
        (snapshot.expense_account_code, "D", snapshot.total, description, ""),
        (snapshot.payment_account_code, "C", snapshot.total, description, ""),
    ]
    return _ensure_balanced(_merge(postings), "Expense")


# ============================================================
# DEPRECIATION / FIXED ASSETS
# ============================================================

def build_lines_for_depreciation_run(snapshot: DepreciationRunSnapshot, codes: dict | None = None) -> list[CandidateLine]:
    c = _codes(codes)
    postings = []
    for item in snapshot.items:
        if item.amount == ZERO:
            continue
        expense_code = item.expense_account_code or code_for("DEPRECIATION_EXPENSE", c)
        accumulated_code = item.accumulated_account_code or code_for("ACCUMULATED_DEPRECIATION", c)
        description = f"Depreciation {snapshot.period_end:%Y-%m} - {item.asset_name}"
        postings.append((expense_code, "D", item.amount, description, ""))
        postings.append((accumulated_code, "C", item.amount, description, ""))

    if not postings:
        raise PostingRuleError("Depreciation run has no non-zero amounts to post")

    return _ensure_balanced(_merge(postings), "Depreciation run")


def build_lines_for_asset_acquisition(snapshot: AssetAcquisitionSnapshot, codes: dict | None = None) -> list[CandidateLine]:
    c = _codes(codes)
    asset_code = snapshot.asset_account_code or code_for("FIXED_ASSETS", c)
    funding_code = snapshot.funding_account_code or code_for("BANK", c)
    postings = [
        (asset_code, "D", snapshot.cost, f"Acquisition of {snapshot.asset_name}", ""),
        (funding_code, "C", snapshot.cost, f"Acquisition of {snapshot.asset_name}", ""),
    ]
    return _ensure_balanced(_merge(postings), "Asset acquisition")


def build_lines_for_asset_disposal(snapshot: AssetDisposalSnapshot, codes: dict | None = None) -> list[CandidateLine]:
    c = _codes(codes)
    name = snapshot.asset_name
    asset_code = snapshot.asset_account_code or code_for("FIXED_ASSETS", c)
    accumulated_code = snapshot.accumulated_account_code or code_for("ACCUMULATED_DEPRECIATION", c)
    proceeds_code = snapshot.proceeds_account_code or code_for("CASH", c)

    postings = [
        (proceeds_code, "D", snapshot.proceeds, f"Disposal of {name}", ""),
        (accumulated_code, "D", snapshot.accumulated_depreciation, f"Remove accumulated depreciation - {name}", ""),
        (asset_code, "C", snapshot.cost, f"Disposal of {name}", ""),
    ]

    gain_loss = snapshot.gain_or_loss
    if gain_loss > ZERO:
        postings.append((code_for("GAIN_ON_DISPOSAL", c), "C", gain_loss, f"Gain on disposal of {name}", ""))
    elif gain_loss < ZERO:
        postings.append((code_for("LOSS_ON_DISPOSAL", c), "D", -gain_loss, f"Loss on disposal of {name}", ""))

    return _ensure_balanced(_merge(postings), "Asset disposal")


# ============================================================
# INVENTORY
# ============================================================

def build_lines_for_inventory_issue(snapshot: InventoryIssueSnapshot, codes: dict | None = None) -> list[CandidateLine]:
    c = _codes(codes)
    if snapshot.cost <= ZERO:
        raise PostingRuleError("Inventory issue has no cost to post")

    cogs_code = snapshot.cogs_account_code or code_for("COGS", c)
    description = snapshot.description or f"Cost of goods issued - {snapshot.issue_id}"
    postings = [
        (cogs_code, "D", snapshot.cost, description, ""),
        (code_for("INVENTORY", c), "C", snapshot.cost, description, ""),
    ]
    return _ensure_balanced(_merge(postings), "Inventory issue")
