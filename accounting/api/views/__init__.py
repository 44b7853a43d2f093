# accounting/api/views/__init__.py

"""
accounting.api.views package

Important:
- ViewSets are defined in accounting.api.view (singular) in this codebase.
- Do NOT import accounting.api.urls from here to avoid circular imports.
"""

from accounting.api.views.accounts import AccountListCreateView, AccountStatusView
from accounting.api.views.documents import (
    BillApproveView,
    BillPaymentView,
    BillVoidView,
    ExpenseCreateView,
    InvoiceIssueView,
    InvoicePaymentView,
    InvoiceVoidView,
)
from accounting.api.views.fiscal_periods import (
    ClosePeriodView,
    FiscalPeriodListCreateView,
    FiscalYearCreateView,
    ReopenPeriodView,
)
from accounting.api.views.reports import (
    AccountBalanceView,
    AccountLedgerView,
    AgingReportView,
    BalanceSheetView,
    ProfitAndLossView,
    ReconciliationView,
    TrialBalanceView,
)

__all__ = [
    "AccountBalanceView",
    "AccountLedgerView",
    "AccountListCreateView",
    "AccountStatusView",
    "AgingReportView",
    "BalanceSheetView",
    "BillApproveView",
    "BillPaymentView",
    "BillVoidView",
    "ClosePeriodView",
    "ExpenseCreateView",
    "FiscalPeriodListCreateView",
    "FiscalYearCreateView",
    "InvoiceIssueView",
    "InvoicePaymentView",
    "InvoiceVoidView",
    "ProfitAndLossView",
    "ReconciliationView",
    "ReopenPeriodView",
    "TrialBalanceView",
]
