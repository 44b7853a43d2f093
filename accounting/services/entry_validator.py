# accounting/services/entry_validator.py

"""
======================================================
PATH: accounting/services/entry_validator.py
======================================================
JOURNAL ENTRY BUILDER & VALIDATOR

Turns a proposed entry (CandidateEntry) into a ValidatedEntry, or raises the
first rule that failed:

1. MalformedLineError           - < 2 lines, bad amounts, debit XOR credit violated
2. InactiveOrUnknownAccountError - unknown or inactive account code
3. UnbalancedEntryError         - sum(debits) != sum(credits) in minor units
4. ClosedPeriodError            - entry_date not inside an open fiscal period

Side-effect-free: reads accounts and periods, never writes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from accounting.models.account import Account
from accounting.models.fiscal_period import FiscalPeriod
from accounting.services.exceptions import (
    InactiveOrUnknownAccountError,
    MalformedLineError,
    UnbalancedEntryError,
)
from accounting.services.money import from_minor, has_sub_minor_precision, to_decimal, to_minor


@dataclass(frozen=True)
class CandidateLine:
    """
    One proposed line. Exactly one of debit/credit must be > 0.

    - account_code: chart account code
    - open_item: receivable/payable item reference (e.g. "invoice:INV-1")
    """

    account_code: str
    debit: object = None
    credit: object = None
    description: str = ""
    open_item: str = ""


@dataclass(frozen=True)
class CandidateEntry:
    entry_date: date
    description: str
    lines: tuple = ()
    reference: str = ""
    counterparty: str = ""
    due_date: date | None = None


@dataclass(frozen=True)
class ValidatedLine:
    account: Account
    is_debit: bool
    amount_minor: int
    description: str = ""
    open_item: str = ""

    @property
    def amount(self):
        return from_minor(self.amount_minor)


@dataclass(frozen=True)
class ValidatedEntry:
    entry_date: date
    description: str
    period: FiscalPeriod
    lines: tuple = ()
    reference: str = ""
    counterparty: str = ""
    due_date: date | None = None
    total_minor: int = 0
    accounts: dict = field(default_factory=dict)

    @property
    def total(self):
        return from_minor(self.total_minor)


def debit_line(account_code: str, amount, description: str = "", open_item: str = "") -> CandidateLine:
    return CandidateLine(account_code=account_code, debit=amount, description=description, open_item=open_item)


def credit_line(account_code: str, amount, description: str = "", open_item: str = "") -> CandidateLine:
    return CandidateLine(account_code=account_code, credit=amount, description=description, open_item=open_item)


def _line_amount_minor(raw, *, index: int, side: str) -> int:
    try:
        value = to_decimal(raw)
    except ValueError as exc:
        raise MalformedLineError(f"Line {index}: invalid {side} amount {raw!r}", line_index=index) from exc

    if value < 0:
        raise MalformedLineError(f"Line {index}: {side} cannot be negative", line_index=index)

    if has_sub_minor_precision(value):
        raise MalformedLineError(
            f"Line {index}: {side} {value} has more precision than the currency allows",
            line_index=index,
        )
    return to_minor(value)


def _normalize_lines(lines) -> list[tuple[str, bool, int, str, str]]:
    if lines is None or len(lines) < 2:
        raise MalformedLineError("Journal entry must contain at least two lines")

    normalized = []
    for index, line in enumerate(lines):
        if not isinstance(line, CandidateLine):
            raise MalformedLineError(f"Line {index}: expected CandidateLine", line_index=index)

        code = (line.account_code or "").strip()
        if not code:
            raise MalformedLineError(f"Line {index}: account code is required", line_index=index)

        debit = _line_amount_minor(line.debit, index=index, side="debit")
        credit = _line_amount_minor(line.credit, index=index, side="credit")

        if debit > 0 and credit > 0:
            raise MalformedLineError(
                f"Line {index}: a line cannot carry both debit and credit", line_index=index
            )
        if debit == 0 and credit == 0:
            raise MalformedLineError(
                f"Line {index}: a line must carry either a debit or a credit", line_index=index
            )

        is_debit = debit > 0
        normalized.append(
            (
                code,
                is_debit,
                debit if is_debit else credit,
                (line.description or "").strip(),
                (line.open_item or "").strip(),
            )
        )
    return normalized


def _resolve_accounts(codes: set[str], *, allow_inactive: bool = False) -> dict[str, Account]:
    accounts = {a.code: a for a in Account.objects.filter(code__in=codes)}

    missing = sorted(codes - set(accounts))
    if missing:
        raise InactiveOrUnknownAccountError(f"Unknown account code(s): {', '.join(missing)}")

    inactive = sorted(code for code, acc in accounts.items() if not acc.is_active)
    if inactive and not allow_inactive:
        raise InactiveOrUnknownAccountError(f"Inactive account(s): {', '.join(inactive)}")

    return accounts


def validate_entry(candidate: CandidateEntry, *, allow_inactive_accounts: bool = False) -> ValidatedEntry:
    """
    allow_inactive_accounts: compensating entries only (reversals of lines
    that already hit those accounts). Unknown codes are still rejected.
    """
    from accounting.services.period_service import assert_period_open

    if not isinstance(candidate, CandidateEntry):
        raise MalformedLineError("Expected a CandidateEntry")

    entry_date = candidate.entry_date
    if isinstance(entry_date, datetime):
        entry_date = entry_date.date()
    if not isinstance(entry_date, date):
        raise MalformedLineError("entry_date must be a date")

    description = (candidate.description or "").strip()
    if not description:
        raise MalformedLineError("Journal entry description is required")

    normalized = _normalize_lines(candidate.lines)
    accounts = _resolve_accounts({row[0] for row in normalized}, allow_inactive=allow_inactive_accounts)

    total_debits = sum(row[2] for row in normalized if row[1])
    total_credits = sum(row[2] for row in normalized if not row[1])
    if total_debits != total_credits:
        raise UnbalancedEntryError(
            f"Journal entry not balanced: debits={from_minor(total_debits)} "
            f"credits={from_minor(total_credits)}"
        )

    period = assert_period_open(entry_date)

    return ValidatedEntry(
        entry_date=entry_date,
        description=description,
        period=period,
        lines=tuple(
            ValidatedLine(
                account=accounts[code],
                is_debit=is_debit,
                amount_minor=amount,
                description=desc,
                open_item=open_item,
            )
            for code, is_debit, amount, desc, open_item in normalized
        ),
        reference=(candidate.reference or "").strip(),
        counterparty=(candidate.counterparty or "").strip(),
        due_date=candidate.due_date,
        total_minor=total_debits,
        accounts=accounts,
    )
