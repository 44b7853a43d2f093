# accounting/services/document_posting.py

"""
======================================================
PATH: accounting/services/document_posting.py
======================================================
DOCUMENT POSTING SERVICES

Glue per source document:
    snapshot -> adapter lines -> validate_entry -> posting engine
plus the inventory side effects a document carries (cost layers on bill
approval, FIFO issue + COGS on invoice issuance).

Idempotency keys (document_type, document_id):
- ("invoice", id)            issuance
- ("invoice_cogs", id)       COGS relief for the invoice's stocked lines
- ("invoice_payment", id)
- ("bill", id)               approval
- ("bill_payment", id)
- ("expense", id)
- ("inventory_issue", id)
- ("depreciation_run", id)
- ("asset_acquisition", id), ("asset_disposal", id)

Documents never store entry pointers; find_entry_for_document() looks the
entry up through the idempotency index.

Side effects only run when THIS call created the gating entry, so a replayed
or concurrently duplicated document never receives stock twice or relieves
it twice. Every service runs in one transaction: any failure (closed period,
insufficient stock, consumed layers) leaves ledger and inventory unchanged.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date

from django.db import transaction

from accounting.adapters import (
    AssetAcquisitionSnapshot,
    AssetDisposalSnapshot,
    BillPaymentSnapshot,
    BillSnapshot,
    DepreciationRunSnapshot,
    ExpenseSnapshot,
    InventoryIssueSnapshot,
    InvoicePaymentSnapshot,
    InvoiceSnapshot,
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
from accounting.models.journal import JournalEntry
from accounting.services.entry_validator import CandidateEntry, validate_entry
from accounting.services.exceptions import NotPostedError, PostingRuleError
from accounting.services.money import ZERO, from_minor, to_minor
from accounting.services.posting_engine import (
    IdempotencyKey,
    find_entry_by_key,
    post_or_get_entry,
)
from accounting.services.reversal_service import reverse_entry

logger = logging.getLogger(__name__)

INVOICE = "invoice"
INVOICE_COGS = "invoice_cogs"
INVOICE_PAYMENT = "invoice_payment"
BILL = "bill"
BILL_PAYMENT = "bill_payment"
EXPENSE = "expense"
INVENTORY_ISSUE = "inventory_issue"
DEPRECIATION_RUN = "depreciation_run"
ASSET_ACQUISITION = "asset_acquisition"
ASSET_DISPOSAL = "asset_disposal"


class _DuplicateDocument(Exception):
    def __init__(self, entry):
        super().__init__(str(entry))
        self.entry = entry


def find_entry_for_document(document_type: str, document_id) -> JournalEntry | None:
    return find_entry_by_key(IdempotencyKey(document_type, str(document_id)))


def _require_live_entry(document_type: str, document_id) -> JournalEntry:
    entry = find_entry_for_document(document_type, document_id)
    if entry is None:
        raise NotPostedError(f"No posted entry for {document_type} {document_id}")
    return entry


def _post(candidate: CandidateEntry, key: IdempotencyKey, created_by=None):
    # A replay returns the stored entry even if its period has since closed.
    existing = find_entry_by_key(key)
    if existing is not None:
        return existing, False
    return post_or_get_entry(validate_entry(candidate), key, created_by=created_by)


def _load_products(product_ids):
    from inventory.models import Product

    ids = {str(pid) for pid in product_ids}
    products = {str(p.id): p for p in Product.objects.filter(id__in=ids)}
    missing = ids - set(products)
    if missing:
        raise PostingRuleError(f"Unknown product(s): {', '.join(sorted(missing))}")
    return products


# ============================================================
# INVOICES (AR)
# ============================================================

@transaction.atomic
def issue_invoice(snapshot: InvoiceSnapshot, *, created_by=None, codes: dict | None = None) -> JournalEntry:
    """
    Post the invoice (Dr AR / Cr Revenue / Cr Tax Payable). Stocked lines are
    FIFO-issued and their cost posted as a separate COGS entry.
    """
    label = snapshot.number or snapshot.invoice_id
    candidate = CandidateEntry(
        entry_date=snapshot.invoice_date,
        description=f"Invoice {label} - {snapshot.customer_name}".strip(" -"),
        lines=tuple(build_lines_for_invoice_issuance(snapshot, codes)),
        reference=snapshot.number,
        counterparty=snapshot.customer_name,
        due_date=snapshot.due_date or snapshot.invoice_date,
    )
    entry, created = _post(candidate, IdempotencyKey(INVOICE, snapshot.invoice_id), created_by)

    if created:
        _relieve_invoice_stock(snapshot, created_by=created_by, codes=codes)

    return entry


def _relieve_invoice_stock(snapshot: InvoiceSnapshot, *, created_by=None, codes=None) -> JournalEntry | None:
    from inventory.services.fifo_costing import issue_stock_fifo

    stocked = [line for line in snapshot.lines if line.is_stocked]
    if not stocked:
        return None

    products = _load_products(line.product_id for line in stocked)

    cost_minor = 0
    for line in stocked:
        result = issue_stock_fifo(
            product=products[str(line.product_id)],
            quantity=line.quantity,
            source_type=INVOICE,
            source_id=snapshot.invoice_id,
        )
        cost_minor += to_minor(result.total_cost)

    if cost_minor <= 0:
        return None

    issue = InventoryIssueSnapshot(
        issue_id=snapshot.invoice_id,
        issue_date=snapshot.invoice_date,
        cost=from_minor(cost_minor),
        description=f"COGS for invoice {snapshot.number or snapshot.invoice_id}",
    )
    candidate = CandidateEntry(
        entry_date=issue.issue_date,
        description=issue.description,
        lines=tuple(build_lines_for_inventory_issue(issue, codes)),
        reference=snapshot.number,
        counterparty=snapshot.customer_name,
    )
    entry, _ = _post(candidate, IdempotencyKey(INVOICE_COGS, snapshot.invoice_id), created_by)
    return entry


@transaction.atomic
def void_invoice(invoice_id, void_date: date | None = None, *, created_by=None, reason: str = "") -> JournalEntry:
    """
    Reverse the invoice entry and, when present, its COGS entry; the issued
    units go back to their original cost layers.
    """
    from inventory.models import InventoryMovement
    from inventory.services.fifo_costing import reverse_issue

    invoice_id = str(invoice_id)
    entry = _require_live_entry(INVOICE, invoice_id)
    reversal = reverse_entry(entry.id, void_date, created_by=created_by, reason=reason or "invoice voided")

    cogs = find_entry_for_document(INVOICE_COGS, invoice_id)
    if cogs is not None:
        reverse_entry(cogs.id, void_date, created_by=created_by, reason=reason or "invoice voided")

    if InventoryMovement.objects.filter(
        source_type=INVOICE, source_id=invoice_id, reason=InventoryMovement.Reason.ISSUE
    ).exists():
        reverse_issue(source_type=INVOICE, source_id=invoice_id)

    logger.info("Invoice voided", extra={"invoice_id": invoice_id, "reversal_id": reversal.id})
    return reversal


@transaction.atomic
def record_invoice_payment(
    snapshot: InvoicePaymentSnapshot, *, created_by=None, codes: dict | None = None
) -> JournalEntry:
    invoice_entry = _require_live_entry(INVOICE, snapshot.invoice_id)
    if invoice_entry.status != JournalEntry.Status.POSTED:
        raise PostingRuleError(f"Invoice {snapshot.invoice_id} is void; payments cannot be applied")

    candidate = CandidateEntry(
        entry_date=snapshot.payment_date,
        description=f"Payment {snapshot.payment_id} for invoice {snapshot.invoice_id}",
        lines=tuple(build_lines_for_invoice_payment(snapshot, codes)),
        reference=snapshot.reference,
        counterparty=snapshot.customer_name or invoice_entry.counterparty,
    )
    entry, _ = _post(candidate, IdempotencyKey(INVOICE_PAYMENT, snapshot.payment_id), created_by)
    return entry


# ============================================================
# BILLS (AP)
# ============================================================

@transaction.atomic
def approve_bill(snapshot: BillSnapshot, *, created_by=None, codes: dict | None = None) -> JournalEntry:
    """
    Post the bill (Dr Inventory / Expense, Cr AP) and open one cost layer per
    physical-stock product line.
    """
    from inventory.services.fifo_costing import receive_stock

    label = snapshot.number or snapshot.bill_id
    candidate = CandidateEntry(
        entry_date=snapshot.bill_date,
        description=f"Bill {label} - {snapshot.vendor_name}".strip(" -"),
        lines=tuple(build_lines_for_bill_approval(snapshot, codes)),
        reference=snapshot.number,
        counterparty=snapshot.vendor_name,
        due_date=snapshot.due_date or snapshot.bill_date,
    )
    entry, created = _post(candidate, IdempotencyKey(BILL, snapshot.bill_id), created_by)

    if created:
        stocked = [line for line in snapshot.lines if line.is_stocked]
        if stocked:
            products = _load_products(line.product_id for line in stocked)
            for line in stocked:
                receive_stock(
                    product=products[str(line.product_id)],
                    quantity=line.quantity,
                    unit_cost=line.unit_cost,
                    received_date=snapshot.bill_date,
                    source_type=BILL,
                    source_id=snapshot.bill_id,
                )

    return entry


@transaction.atomic
def void_bill(bill_id, void_date: date | None = None, *, created_by=None, reason: str = "") -> JournalEntry:
    """
    Remove the bill's cost layers (CostLayerConsumedError if any unit was
    issued) and reverse the approval entry.
    """
    from inventory.services.fifo_costing import remove_receipt_layers

    bill_id = str(bill_id)
    entry = _require_live_entry(BILL, bill_id)

    remove_receipt_layers(source_type=BILL, source_id=bill_id)
    reversal = reverse_entry(entry.id, void_date, created_by=created_by, reason=reason or "bill voided")

    logger.info("Bill voided", extra={"bill_id": bill_id, "reversal_id": reversal.id})
    return reversal


@transaction.atomic
def record_bill_payment(snapshot: BillPaymentSnapshot, *, created_by=None, codes: dict | None = None) -> JournalEntry:
    bill_entry = _require_live_entry(BILL, snapshot.bill_id)
    if bill_entry.status != JournalEntry.Status.POSTED:
        raise PostingRuleError(f"Bill {snapshot.bill_id} is void; payments cannot be applied")

    candidate = CandidateEntry(
        entry_date=snapshot.payment_date,
        description=f"Payment {snapshot.payment_id} for bill {snapshot.bill_id}",
        lines=tuple(build_lines_for_bill_payment(snapshot, codes)),
        reference=snapshot.reference,
        counterparty=snapshot.vendor_name or bill_entry.counterparty,
    )
    entry, _ = _post(candidate, IdempotencyKey(BILL_PAYMENT, snapshot.payment_id), created_by)
    return entry


# ============================================================
# EXPENSES
# ============================================================

@transaction.atomic
def record_expense(snapshot: ExpenseSnapshot, *, created_by=None, codes: dict | None = None) -> JournalEntry:
    candidate = CandidateEntry(
        entry_date=snapshot.expense_date,
        description=snapshot.description or f"Expense {snapshot.expense_id} - {snapshot.payee}".strip(" -"),
        lines=tuple(build_lines_for_expense(snapshot, codes)),
        counterparty=snapshot.payee,
    )
    entry, _ = _post(candidate, IdempotencyKey(EXPENSE, snapshot.expense_id), created_by)
    return entry


# ============================================================
# INVENTORY ISSUES
# ============================================================

def issue_inventory(
    snapshot: InventoryIssueSnapshot,
    *,
    items=(),
    created_by=None,
    codes: dict | None = None,
) -> JournalEntry:
    """
    Post Dr COGS / Cr Inventory for an internal issue.

    items: optional iterable of (product, quantity). When given, stock is
    FIFO-issued here and the resulting cost replaces snapshot.cost.
    """
    key = IdempotencyKey(INVENTORY_ISSUE, snapshot.issue_id)
    existing = find_entry_by_key(key)
    if existing is not None:
        return existing

    from inventory.services.fifo_costing import issue_stock_fifo

    try:
        with transaction.atomic():
            items = list(items or ())
            if items:
                cost_minor = 0
                for product, quantity in items:
                    result = issue_stock_fifo(
                        product=product,
                        quantity=quantity,
                        source_type=INVENTORY_ISSUE,
                        source_id=snapshot.issue_id,
                    )
                    cost_minor += to_minor(result.total_cost)
                snapshot = dataclasses.replace(snapshot, cost=from_minor(cost_minor))

            candidate = CandidateEntry(
                entry_date=snapshot.issue_date,
                description=snapshot.description or f"Inventory issue {snapshot.issue_id}",
                lines=tuple(build_lines_for_inventory_issue(snapshot, codes)),
            )
            entry, created = _post(candidate, key, created_by)
            if not created:
                raise _DuplicateDocument(entry)
    except _DuplicateDocument as dup:
        return dup.entry

    return entry


@transaction.atomic
def reverse_inventory_issue(issue_id, reversal_date: date | None = None, *, created_by=None) -> JournalEntry:
    from inventory.models import InventoryMovement
    from inventory.services.fifo_costing import reverse_issue

    issue_id = str(issue_id)
    entry = _require_live_entry(INVENTORY_ISSUE, issue_id)
    reversal = reverse_entry(entry.id, reversal_date, created_by=created_by, reason="inventory issue reversed")

    if InventoryMovement.objects.filter(
        source_type=INVENTORY_ISSUE, source_id=issue_id, reason=InventoryMovement.Reason.ISSUE
    ).exists():
        reverse_issue(source_type=INVENTORY_ISSUE, source_id=issue_id)

    return reversal


# ============================================================
# FIXED ASSETS
# ============================================================

@transaction.atomic
def post_depreciation_run(
    snapshot: DepreciationRunSnapshot, *, created_by=None, codes: dict | None = None
) -> JournalEntry | None:
    if snapshot.total == ZERO:
        return None

    candidate = CandidateEntry(
        entry_date=snapshot.period_end,
        description=f"Depreciation for {snapshot.period_end:%Y-%m}",
        lines=tuple(build_lines_for_depreciation_run(snapshot, codes)),
        reference=f"DEP-{snapshot.period_end:%Y%m}",
    )
    entry, _ = _post(candidate, IdempotencyKey(DEPRECIATION_RUN, snapshot.run_id), created_by)
    return entry


@transaction.atomic
def record_asset_acquisition(
    snapshot: AssetAcquisitionSnapshot, *, created_by=None, codes: dict | None = None
) -> JournalEntry:
    candidate = CandidateEntry(
        entry_date=snapshot.acquisition_date,
        description=f"Acquisition of {snapshot.asset_name}",
        lines=tuple(build_lines_for_asset_acquisition(snapshot, codes)),
    )
    entry, _ = _post(candidate, IdempotencyKey(ASSET_ACQUISITION, snapshot.asset_id), created_by)
    return entry


@transaction.atomic
def record_asset_disposal(
    snapshot: AssetDisposalSnapshot, *, created_by=None, codes: dict | None = None
) -> JournalEntry:
    candidate = CandidateEntry(
        entry_date=snapshot.disposal_date,
        description=f"Disposal of {snapshot.asset_name}",
        lines=tuple(build_lines_for_asset_disposal(snapshot, codes)),
    )
    entry, _ = _post(candidate, IdempotencyKey(ASSET_DISPOSAL, snapshot.asset_id), created_by)
    return entry
