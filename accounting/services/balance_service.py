# accounting/services/balance_service.py

"""
BALANCE & LEDGER SERVICE (AUTHORITATIVE)

Read-only ledger aggregation helpers shared by every report.

RULES:
- READ-ONLY: no writes, ever
- JournalLine of ledger-effective entries is the single source of truth
  (status posted OR void: a voided original and its posted reversal both
  count and net to zero; drafts never count)
- Accounting timeline uses JournalEntry.entry_date
- The AccountBalance cache is never read here
- Reports run inside report_snapshot() so every query sees the same data
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from decimal import Decimal

from django.db import DEFAULT_DB_ALIAS, connections, transaction
from django.db.models import Q, Sum

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.models.journal_line import JournalLine
from accounting.services.chart_registry import get_account
from accounting.services.money import ZERO, from_minor, to_minor


@contextmanager
def report_snapshot(using: str | None = None):
    """
    One read transaction for a whole report. On PostgreSQL the outermost
    snapshot is REPEATABLE READ READ ONLY so concurrent postings cannot make
    a report internally inconsistent.
    """
    alias = using or DEFAULT_DB_ALIAS
    conn = connections[alias]
    outermost = not conn.in_atomic_block

    with transaction.atomic(using=alias):
        if outermost and conn.vendor == "postgresql":
            with conn.cursor() as cursor:
                cursor.execute("SET TRANSACTION ISOLATION LEVEL REPEATABLE READ READ ONLY")
        yield


def ledger_lines(*, start: date | None = None, end: date | None = None, exclude_source_types=()):
    qs = JournalLine.objects.filter(entry__status__in=JournalEntry.LEDGER_STATUSES)
    if start is not None:
        qs = qs.filter(entry__entry_date__gte=start)
    if end is not None:
        qs = qs.filter(entry__entry_date__lte=end)
    if exclude_source_types:
        # Reversals of an excluded entry carry their own source type.
        types = list(exclude_source_types)
        qs = qs.exclude(Q(entry__source_type__in=types) | Q(entry__reverses__source_type__in=types))
    return qs


def account_totals(qs) -> dict[int, tuple[int, int]]:
    """
    {account_id: (debit_minor, credit_minor)} for the given line queryset.
    """
    rows = qs.values("account_id").annotate(
        debits=Sum("amount", filter=Q(entry_type=JournalLine.DEBIT)),
        credits=Sum("amount", filter=Q(entry_type=JournalLine.CREDIT)),
    )
    return {
        r["account_id"]: (to_minor(r["debits"] or ZERO), to_minor(r["credits"] or ZERO))
        for r in rows
    }


def signed_minor(account: Account, debit_minor: int, credit_minor: int) -> int:
    """
    Balance rule:
    - Assets & Expenses -> debits - credits
    - Liabilities, Equity & Revenue -> credits - debits
    """
    if account.is_debit_normal:
        return debit_minor - credit_minor
    return credit_minor - debit_minor


def _balance_minor(account: Account, *, start=None, end=None) -> int:
    totals = account_totals(ledger_lines(start=start, end=end).filter(account=account))
    debit_minor, credit_minor = totals.get(account.id, (0, 0))
    return signed_minor(account, debit_minor, credit_minor)


def get_account_balance(code: str, as_of: date | None = None) -> Decimal:
    """
    Balance signed by the account's normal side, from the full journal.
    """
    account = get_account(code, require_active=False)
    with report_snapshot():
        return from_minor(_balance_minor(account, end=as_of))


def get_account_ledger(code: str, start: date, end: date) -> dict:
    """
    Opening balance (before start), every line in [start, end] with its
    running balance, closing balance.
    """
    account = get_account(code, require_active=False)

    with report_snapshot():
        opening = 0
        if start is not None:
            opening = _balance_minor(account, end=date.fromordinal(start.toordinal() - 1))

        lines = (
            ledger_lines(start=start, end=end)
            .filter(account=account)
            .select_related("entry")
            .order_by("entry__entry_date", "entry_id", "line_no", "id")
        )

        running = opening
        rows = []
        for line in lines:
            amount_minor = to_minor(line.amount)
            is_debit = line.entry_type == JournalLine.DEBIT
            running += signed_minor(
                account,
                amount_minor if is_debit else 0,
                0 if is_debit else amount_minor,
            )
            rows.append(
                {
                    "entry_id": line.entry_id,
                    "entry_date": line.entry.entry_date.isoformat(),
                    "description": line.description or line.entry.description,
                    "reference": line.entry.reference,
                    "status": line.entry.status,
                    "debit": float(line.debit),
                    "credit": float(line.credit),
                    "running_balance": float(from_minor(running)),
                    "running_balance_minor": running,
                }
            )

    return {
        "account_code": account.code,
        "account_name": account.name,
        "account_type": account.account_type,
        "normal_balance": account.normal_balance,
        "start": start.isoformat() if start else None,
        "end": end.isoformat() if end else None,
        "opening_balance": float(from_minor(opening)),
        "opening_balance_minor": opening,
        "lines": rows,
        "closing_balance": float(from_minor(running)),
        "closing_balance_minor": running,
    }
