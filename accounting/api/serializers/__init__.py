from .accounts import AccountSerializer
from .documents import (
    BillApproveSerializer,
    BillPaymentSerializer,
    ExpenseSerializer,
    InvoiceIssueSerializer,
    InvoicePaymentSerializer,
    VoidDocumentSerializer,
)
from .fiscal_periods import (
    ClosePeriodSerializer,
    FiscalPeriodCreateSerializer,
    FiscalPeriodSerializer,
    FiscalYearCreateSerializer,
)
from .journal_entries import (
    DraftEntrySerializer,
    JournalEntrySerializer,
    JournalLineSerializer,
    ReverseEntrySerializer,
)

__all__ = [
    "AccountSerializer",
    "BillApproveSerializer",
    "BillPaymentSerializer",
    "ClosePeriodSerializer",
    "DraftEntrySerializer",
    "ExpenseSerializer",
    "FiscalPeriodCreateSerializer",
    "FiscalPeriodSerializer",
    "FiscalYearCreateSerializer",
    "InvoiceIssueSerializer",
    "InvoicePaymentSerializer",
    "JournalEntrySerializer",
    "JournalLineSerializer",
    "ReverseEntrySerializer",
    "VoidDocumentSerializer",
]
