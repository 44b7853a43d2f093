# accounting/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

# Canonical ViewSets live in accounting/api/view.py (singular) in this project.
from accounting.api.view import JournalEntryViewSet, JournalLineViewSet
from accounting.api.views import (
    AccountBalanceView,
    AccountLedgerView,
    AccountListCreateView,
    AccountStatusView,
    AgingReportView,
    BalanceSheetView,
    BillApproveView,
    BillPaymentView,
    BillVoidView,
    ClosePeriodView,
    ExpenseCreateView,
    FiscalPeriodListCreateView,
    FiscalYearCreateView,
    InvoiceIssueView,
    InvoicePaymentView,
    InvoiceVoidView,
    ProfitAndLossView,
    ReconciliationView,
    ReopenPeriodView,
    TrialBalanceView,
)

router = DefaultRouter()
router.register("journal-entries", JournalEntryViewSet, basename="journal-entry")
router.register("journal-lines", JournalLineViewSet, basename="journal-line")

urlpatterns = [
    # Router endpoints
    path("", include(router.urls)),
    # Chart of accounts
    path("accounts/", AccountListCreateView.as_view(), name="accounts"),
    path(
        "accounts/<str:code>/deactivate/",
        AccountStatusView.as_view(active=False),
        name="account-deactivate",
    ),
    path(
        "accounts/<str:code>/reactivate/",
        AccountStatusView.as_view(active=True),
        name="account-reactivate",
    ),
    # Fiscal periods
    path("fiscal-periods/", FiscalPeriodListCreateView.as_view(), name="fiscal-periods"),
    path("fiscal-periods/year/", FiscalYearCreateView.as_view(), name="fiscal-year"),
    path("fiscal-periods/<int:pk>/close/", ClosePeriodView.as_view(), name="fiscal-period-close"),
    path("fiscal-periods/<int:pk>/reopen/", ReopenPeriodView.as_view(), name="fiscal-period-reopen"),
    # Source documents
    path("invoices/issue/", InvoiceIssueView.as_view(), name="invoice-issue"),
    path("invoices/payments/", InvoicePaymentView.as_view(), name="invoice-payment"),
    path("invoices/<str:document_id>/void/", InvoiceVoidView.as_view(), name="invoice-void"),
    path("bills/approve/", BillApproveView.as_view(), name="bill-approve"),
    path("bills/payments/", BillPaymentView.as_view(), name="bill-payment"),
    path("bills/<str:document_id>/void/", BillVoidView.as_view(), name="bill-void"),
    path("expenses/", ExpenseCreateView.as_view(), name="expenses"),
    # Reports
    path("trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    path("profit-and-loss/", ProfitAndLossView.as_view(), name="profit-and-loss"),
    path("balance-sheet/", BalanceSheetView.as_view(), name="balance-sheet"),
    path("account-ledger/<str:code>/", AccountLedgerView.as_view(), name="account-ledger"),
    path("account-balance/<str:code>/", AccountBalanceView.as_view(), name="account-balance"),
    path("aging/<str:kind>/", AgingReportView.as_view(), name="aging"),
    path("reconciliation/", ReconciliationView.as_view(), name="reconciliation"),
]
