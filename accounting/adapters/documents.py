# accounting/adapters/documents.py

"""
======================================================
PATH: accounting/adapters/documents.py
======================================================
DOCUMENT SNAPSHOTS (ADAPTER INPUTS)

Closed set of typed inputs, one per source document type. The surrounding
application builds these from its own records; the ledger never receives an
untyped payload.

Rules enforced at construction (DocumentSnapshotError):
- ids are non-blank strings
- money normalized to 2dp, never negative
- quantities are whole units
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from accounting.services.exceptions import PostingRuleError
from accounting.services.money import ZERO, money


class DocumentSnapshotError(PostingRuleError):
    """Raised when a document snapshot is malformed."""


PHYSICAL_STOCK = "physical_stock"


def _req_id(value, name: str) -> str:
    s = str(value if value is not None else "").strip()
    if not s:
        raise DocumentSnapshotError(f"{name} is required")
    return s


def _non_negative(value, name: str) -> Decimal:
    try:
        amt = money(value)
    except ValueError as exc:
        raise DocumentSnapshotError(f"{name}: {exc}") from exc
    if amt < ZERO:
        raise DocumentSnapshotError(f"{name} cannot be negative")
    return amt


def _positive(value, name: str) -> Decimal:
    amt = _non_negative(value, name)
    if amt <= ZERO:
        raise DocumentSnapshotError(f"{name} must be > 0")
    return amt


def _whole_qty(value, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise DocumentSnapshotError(f"{name} must be a whole integer unit")
    if isinstance(value, int):
        qty = value
    elif isinstance(value, Decimal) and value == value.to_integral_value():
        qty = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        qty = int(value.strip())
    else:
        raise DocumentSnapshotError(f"{name} must be a whole integer unit")
    if qty < 0:
        raise DocumentSnapshotError(f"{name} cannot be negative")
    return qty


def _set(obj, name, value):
    object.__setattr__(obj, name, value)


def _require_date(value, name: str) -> None:
    if not isinstance(value, date):
        raise DocumentSnapshotError(f"{name} must be a date")


# ============================================================
# INVOICES (AR)
# ============================================================

@dataclass(frozen=True)
class InvoiceLine:
    """
    amount: line subtotal after discount, before tax
    tax_amount: tax computed by the caller (tax rules live outside the ledger)
    product_id/quantity/inventory_category: set for stocked goods so issuing
    the invoice also relieves inventory at FIFO cost
    """

    amount: Decimal
    tax_amount: Decimal = ZERO
    revenue_account_code: str = ""
    description: str = ""
    product_id: str | None = None
    quantity: int = 0
    inventory_category: str = ""

    def __post_init__(self):
        _set(self, "amount", _non_negative(self.amount, "line amount"))
        _set(self, "tax_amount", _non_negative(self.tax_amount, "line tax_amount"))
        _set(self, "revenue_account_code", (self.revenue_account_code or "").strip())
        _set(self, "quantity", _whole_qty(self.quantity, "line quantity"))
        _set(self, "inventory_category", (self.inventory_category or "").strip())

    @property
    def is_stocked(self) -> bool:
        return bool(self.product_id) and self.quantity > 0 and self.inventory_category == PHYSICAL_STOCK


@dataclass(frozen=True)
class InvoiceSnapshot:
    invoice_id: str
    invoice_date: date
    customer_name: str
    lines: tuple
    due_date: date | None = None
    number: str = ""

    def __post_init__(self):
        _set(self, "invoice_id", _req_id(self.invoice_id, "invoice_id"))
        _require_date(self.invoice_date, "invoice_date")
        _set(self, "lines", tuple(self.lines or ()))
        if not self.lines:
            raise DocumentSnapshotError("Invoice must have at least one line")
        if any(not isinstance(line, InvoiceLine) for line in self.lines):
            raise DocumentSnapshotError("Invoice lines must be InvoiceLine")
        if self.total <= ZERO:
            raise DocumentSnapshotError("Invoice total must be > 0")

    @property
    def subtotal(self) -> Decimal:
        return money(sum((line.amount for line in self.lines), ZERO))

    @property
    def tax_total(self) -> Decimal:
        return money(sum((line.tax_amount for line in self.lines), ZERO))

    @property
    def total(self) -> Decimal:
        return money(self.subtotal + self.tax_total)

    @property
    def open_item(self) -> str:
        return f"invoice:{self.invoice_id}"


@dataclass(frozen=True)
class InvoicePaymentSnapshot:
    payment_id: str
    invoice_id: str
    payment_date: date
    amount: Decimal
    deposit_account_code: str = ""
    customer_name: str = ""
    reference: str = ""

    def __post_init__(self):
        _set(self, "payment_id", _req_id(self.payment_id, "payment_id"))
        _set(self, "invoice_id", _req_id(self.invoice_id, "invoice_id"))
        _require_date(self.payment_date, "payment_date")
        _set(self, "amount", _positive(self.amount, "payment amount"))
        _set(self, "deposit_account_code", (self.deposit_account_code or "").strip())


# ============================================================
# BILLS (AP)
# ============================================================

@dataclass(frozen=True)
class BillLine:
    """
    Physical-stock product lines debit Inventory and open a cost layer;
    everything else debits expense_account_code (default COGS).
    """

    quantity: int
    unit_cost: Decimal
    tax_amount: Decimal = ZERO
    product_id: str | None = None
    inventory_category: str = ""
    expense_account_code: str = ""
    description: str = ""

    def __post_init__(self):
        _set(self, "quantity", _whole_qty(self.quantity, "bill line quantity"))
        _set(self, "unit_cost", _non_negative(self.unit_cost, "bill line unit_cost"))
        _set(self, "tax_amount", _non_negative(self.tax_amount, "bill line tax_amount"))
        _set(self, "inventory_category", (self.inventory_category or "").strip())
        _set(self, "expense_account_code", (self.expense_account_code or "").strip())
        if self.is_stocked and self.quantity <= 0:
            raise DocumentSnapshotError("Stocked bill lines need a quantity >= 1")

    @property
    def is_stocked(self) -> bool:
        return bool(self.product_id) and self.inventory_category == PHYSICAL_STOCK

    @property
    def line_cost(self) -> Decimal:
        return money(Decimal(self.quantity) * self.unit_cost)

    @property
    def line_total(self) -> Decimal:
        return money(self.line_cost + self.tax_amount)


@dataclass(frozen=True)
class BillSnapshot:
    bill_id: str
    bill_date: date
    vendor_name: str
    lines: tuple
    due_date: date | None = None
    number: str = ""

    def __post_init__(self):
        _set(self, "bill_id", _req_id(self.bill_id, "bill_id"))
        _require_date(self.bill_date, "bill_date")
        _set(self, "lines", tuple(self.lines or ()))
        if not self.lines:
            raise DocumentSnapshotError("Bill must have at least one line")
        if any(not isinstance(line, BillLine) for line in self.lines):
            raise DocumentSnapshotError("Bill lines must be BillLine")
        if self.total <= ZERO:
            raise DocumentSnapshotError("Bill total must be > 0")

    @property
    def total(self) -> Decimal:
        return money(sum((line.line_total for line in self.lines), ZERO))

    @property
    def open_item(self) -> str:
        return f"bill:{self.bill_id}"


@dataclass(frozen=True)
class BillPaymentSnapshot:
    payment_id: str
    bill_id: str
    payment_date: date
    amount: Decimal
    pay_from_account_code: str = ""
    vendor_name: str = ""
    reference: str = ""

    def __post_init__(self):
        _set(self, "payment_id", _req_id(self.payment_id, "payment_id"))
        _set(self, "bill_id", _req_id(self.bill_id, "bill_id"))
        _require_date(self.payment_date, "payment_date")
        _set(self, "amount", _positive(self.amount, "payment amount"))
        _set(self, "pay_from_account_code", (self.pay_from_account_code or "").strip())


# ============================================================
# EXPENSES
# ============================================================

@dataclass(frozen=True)
class ExpenseSnapshot:
    expense_id: str
    expense_date: date
    amount: Decimal
    expense_account_code: str
    payment_account_code: str
    tax_amount: Decimal = ZERO
    payee: str = ""
    description: str = ""

    def __post_init__(self):
        _set(self, "expense_id", _req_id(self.expense_id, "expense_id"))
        _require_date(self.expense_date, "expense_date")
        _set(self, "amount", _positive(self.amount, "expense amount"))
        _set(self, "tax_amount", _non_negative(self.tax_amount, "expense tax_amount"))
        _set(self, "expense_account_code", _req_id(self.expense_account_code, "expense_account_code"))
        _set(self, "payment_account_code", _req_id(self.payment_account_code, "payment_account_code"))

    @property
    def total(self) -> Decimal:
        return money(self.amount + self.tax_amount)


# ============================================================
# DEPRECIATION / FIXED ASSETS
# ============================================================

@dataclass(frozen=True)
class DepreciationRunItem:
    asset_id: str
    asset_name: str
    amount: Decimal
    expense_account_code: str = ""
    accumulated_account_code: str = ""

    def __post_init__(self):
        _set(self, "asset_id", _req_id(self.asset_id, "asset_id"))
        _set(self, "amount", _non_negative(self.amount, "depreciation amount"))
        _set(self, "expense_account_code", (self.expense_account_code or "").strip())
        _set(self, "accumulated_account_code", (self.accumulated_account_code or "").strip())


@dataclass(frozen=True)
class DepreciationRunSnapshot:
    run_id: str
    period_end: date
    items: tuple = field(default_factory=tuple)

    def __post_init__(self):
        _set(self, "run_id", _req_id(self.run_id, "run_id"))
        _require_date(self.period_end, "period_end")
        _set(self, "items", tuple(self.items or ()))
        if any(not isinstance(item, DepreciationRunItem) for item in self.items):
            raise DocumentSnapshotError("Depreciation run items must be DepreciationRunItem")

    @property
    def total(self) -> Decimal:
        return money(sum((item.amount for item in self.items), ZERO))


@dataclass(frozen=True)
class AssetAcquisitionSnapshot:
    asset_id: str
    asset_name: str
    acquisition_date: date
    cost: Decimal
    funding_account_code: str = ""
    asset_account_code: str = ""

    def __post_init__(self):
        _set(self, "asset_id", _req_id(self.asset_id, "asset_id"))
        _require_date(self.acquisition_date, "acquisition_date")
        _set(self, "cost", _positive(self.cost, "asset cost"))
        _set(self, "funding_account_code", (self.funding_account_code or "").strip())
        _set(self, "asset_account_code", (self.asset_account_code or "").strip())


@dataclass(frozen=True)
class AssetDisposalSnapshot:
    asset_id: str
    asset_name: str
    disposal_date: date
    cost: Decimal
    accumulated_depreciation: Decimal
    proceeds: Decimal = ZERO
    proceeds_account_code: str = ""
    asset_account_code: str = ""
    accumulated_account_code: str = ""

    def __post_init__(self):
        _set(self, "asset_id", _req_id(self.asset_id, "asset_id"))
        _require_date(self.disposal_date, "disposal_date")
        _set(self, "cost", _positive(self.cost, "asset cost"))
        _set(
            self,
            "accumulated_depreciation",
            _non_negative(self.accumulated_depreciation, "accumulated_depreciation"),
        )
        _set(self, "proceeds", _non_negative(self.proceeds, "disposal proceeds"))
        if self.accumulated_depreciation > self.cost:
            raise DocumentSnapshotError("accumulated_depreciation cannot exceed cost")

    @property
    def book_value(self) -> Decimal:
        return money(self.cost - self.accumulated_depreciation)

    @property
    def gain_or_loss(self) -> Decimal:
        return money(self.proceeds - self.book_value)


# ============================================================
# INVENTORY
# ============================================================

@dataclass(frozen=True)
class InventoryIssueSnapshot:
    """
    cost: FIFO cost of the issued quantity, computed by inventory costing.
    """

    issue_id: str
    issue_date: date
    cost: Decimal
    description: str = ""
    cogs_account_code: str = ""

    def __post_init__(self):
        _set(self, "issue_id", _req_id(self.issue_id, "issue_id"))
        _require_date(self.issue_date, "issue_date")
        _set(self, "cost", _non_negative(self.cost, "issue cost"))
        _set(self, "cogs_account_code", (self.cogs_account_code or "").strip())
