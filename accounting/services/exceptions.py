# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for accounting services.

Validator errors carry a stable `kind` so API callers can branch on the rule
that failed without parsing messages. Every one of these is recoverable: the
ledger is left exactly as it was before the call.
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""


class EntryValidationError(AccountingServiceError):
    """Raised by the entry validator; `kind` names the failed rule."""

    kind = "invalid-entry"

    def __init__(self, message: str = "", *, line_index: int | None = None):
        super().__init__(message)
        self.line_index = line_index


class MalformedLineError(EntryValidationError):
    kind = "malformed-line"


class InactiveOrUnknownAccountError(EntryValidationError):
    kind = "inactive-account"


class UnbalancedEntryError(EntryValidationError):
    kind = "unbalanced"


class ClosedPeriodError(EntryValidationError):
    kind = "closed-period"


class NotPostedError(AccountingServiceError):
    """Raised when reversing or voiding an entry that is not posted."""

    kind = "not-posted"


class EntryNotFoundError(AccountingServiceError):
    """Raised when a journal entry id does not exist."""

    kind = "not-found"


class AlreadyReversedError(AccountingServiceError):
    """Raised when an entry already has a compensating reversal."""

    kind = "already-reversed"


class PostingRuleError(AccountingServiceError):
    """Raised when a posting rule (document adapter) cannot be applied."""


class AccountResolutionError(AccountingServiceError):
    """Raised when an expected account cannot be resolved."""


class JournalEntryCreationError(AccountingServiceError):
    """Raised when a journal entry cannot be created."""


class PeriodError(AccountingServiceError):
    """Raised when a fiscal period cannot be created, closed or reopened."""


class BalanceSheetImbalanceError(AccountingServiceError):
    """Raised when assets != liabilities + equity."""
