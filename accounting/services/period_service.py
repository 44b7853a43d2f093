# accounting/services/period_service.py

"""
======================================================
PATH: accounting/services/period_service.py
======================================================
FISCAL PERIOD SERVICE

Purpose:
- Create fiscal periods (single range or a full year of monthly periods)
- Resolve the period covering a date
- Guard postings: no entry may land in a closed (or missing) period
- Close / reopen periods

Closing rules:
- A period with draft entries dated inside it cannot be closed
- Optionally posts a closing entry (revenue/expense -> retained earnings)
  dated on the period end, keyed ("period_close", "<period id>:<n>") where n
  counts the closes of that period; a re-close after reopen only sweeps the
  activity posted since the previous closing entry
"""

from __future__ import annotations

import calendar
import logging
from datetime import date

from django.db import transaction
from django.db.models import Case, DecimalField, F, Sum, Value, When
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.fiscal_period import FiscalPeriod
from accounting.models.journal import JournalEntry
from accounting.models.journal_line import JournalLine
from accounting.services.exceptions import ClosedPeriodError, PeriodError
from accounting.services.money import ZERO, money

logger = logging.getLogger(__name__)

CLOSING_SOURCE_TYPE = "period_close"


def get_period_for_date(day: date) -> FiscalPeriod | None:
    return FiscalPeriod.objects.filter(start_date__lte=day, end_date__gte=day).first()


def assert_period_open(day: date) -> FiscalPeriod:
    """
    Return the open period covering `day`.

    Raises:
        ClosedPeriodError if no period covers the date or it is closed.
    """
    period = get_period_for_date(day)
    if period is None:
        raise ClosedPeriodError(f"Posting blocked: no fiscal period covers {day}")
    if not period.is_open:
        raise ClosedPeriodError(
            f"Posting blocked: {day} falls inside closed period {period.name}"
        )
    return period


def create_period(*, start_date: date, end_date: date, name: str = "") -> FiscalPeriod:
    if start_date > end_date:
        raise PeriodError("end_date must be >= start_date")

    if FiscalPeriod.objects.filter(
        start_date__lte=end_date, end_date__gte=start_date
    ).exists():
        raise PeriodError(f"Period {start_date}..{end_date} overlaps an existing period")

    period = FiscalPeriod.objects.create(start_date=start_date, end_date=end_date, name=name)
    logger.info("Fiscal period created", extra={"period_id": period.id, "period_name": period.name})
    return period


@transaction.atomic
def create_fiscal_year(year: int) -> list[FiscalPeriod]:
    """Create the twelve monthly periods of `year`; existing months are kept."""
    periods: list[FiscalPeriod] = []
    for month in range(1, 13):
        start = date(year, month, 1)
        end = date(year, month, calendar.monthrange(year, month)[1])
        existing = FiscalPeriod.objects.filter(start_date=start, end_date=end).first()
        if existing is not None:
            periods.append(existing)
            continue
        periods.append(create_period(start_date=start, end_date=end))
    return periods


def _closing_lines(period: FiscalPeriod) -> list[tuple[Account, str, object]]:
    """Per revenue/expense account net activity inside the period."""
    signed = Case(
        When(entry_type=JournalLine.DEBIT, then=F("amount")),
        default=-F("amount"),
        output_field=DecimalField(max_digits=16, decimal_places=2),
    )
    rows = (
        JournalLine.objects.filter(
            entry__status__in=JournalEntry.LEDGER_STATUSES,
            entry__entry_date__gte=period.start_date,
            entry__entry_date__lte=period.end_date,
            account__account_type__in=[Account.REVENUE, Account.EXPENSE],
        )
        .values("account_id")
        .annotate(net=Coalesce(Sum(signed), Value(ZERO)))
    )

    accounts = Account.objects.in_bulk([r["account_id"] for r in rows])
    out = []
    for r in rows:
        net = money(r["net"])  # debit - credit
        if net == ZERO:
            continue
        account = accounts[r["account_id"]]
        # Zero the account: debit-heavy accounts get a credit and vice versa.
        side = JournalLine.CREDIT if net > 0 else JournalLine.DEBIT
        out.append((account, side, abs(net)))
    return out


def _post_closing_entry(period: FiscalPeriod, retained_earnings_code: str | None):
    from accounting.services.chart_registry import code_for
    from accounting.services.entry_validator import CandidateEntry, CandidateLine, validate_entry
    from accounting.services.posting_engine import IdempotencyKey, post_entry

    closing = _closing_lines(period)
    if not closing:
        return None

    re_code = (retained_earnings_code or "").strip() or code_for("RETAINED_EARNINGS")

    lines = []
    net_debit = ZERO
    for account, side, amount in closing:
        if side == JournalLine.DEBIT:
            lines.append(CandidateLine(account_code=account.code, debit=amount, description="Close to retained earnings"))
            net_debit += amount
        else:
            lines.append(CandidateLine(account_code=account.code, credit=amount, description="Close to retained earnings"))
            net_debit -= amount

    if net_debit > 0:
        lines.append(CandidateLine(account_code=re_code, credit=net_debit, description="Net income for period"))
    elif net_debit < 0:
        lines.append(CandidateLine(account_code=re_code, debit=-net_debit, description="Net loss for period"))

    candidate = CandidateEntry(
        entry_date=period.end_date,
        description=f"Period close {period.name}",
        lines=tuple(lines),
        reference=f"CLOSE-{period.name}",
    )
    seq = JournalEntry.objects.filter(
        source_type=CLOSING_SOURCE_TYPE, source_id__startswith=f"{period.id}:"
    ).count() + 1
    return post_entry(
        validate_entry(candidate),
        IdempotencyKey(CLOSING_SOURCE_TYPE, f"{period.id}:{seq}"),
    )


@transaction.atomic
def close_period(
    period_id: int,
    *,
    post_closing_entry: bool = False,
    retained_earnings_code: str | None = None,
) -> FiscalPeriod:
    period = FiscalPeriod.objects.select_for_update().filter(pk=period_id).first()
    if period is None:
        raise PeriodError(f"Fiscal period {period_id} not found")

    if not period.is_open:
        raise PeriodError(f"Fiscal period {period.name} is already closed")

    drafts = JournalEntry.objects.filter(
        status=JournalEntry.Status.DRAFT,
        entry_date__gte=period.start_date,
        entry_date__lte=period.end_date,
    ).count()
    if drafts:
        raise PeriodError(
            f"Cannot close {period.name}: {drafts} draft entr{'y' if drafts == 1 else 'ies'} "
            "dated inside the period must be posted or deleted first"
        )

    if post_closing_entry:
        _post_closing_entry(period, retained_earnings_code)

    period.status = FiscalPeriod.Status.CLOSED
    period.closed_at = timezone.now()
    period.save(update_fields=["status", "closed_at", "updated_at"])

    logger.info("Fiscal period closed", extra={"period_id": period.id, "period_name": period.name})
    return period


@transaction.atomic
def reopen_period(period_id: int) -> FiscalPeriod:
    period = FiscalPeriod.objects.select_for_update().filter(pk=period_id).first()
    if period is None:
        raise PeriodError(f"Fiscal period {period_id} not found")

    if period.is_open:
        raise PeriodError(f"Fiscal period {period.name} is already open")

    period.status = FiscalPeriod.Status.OPEN
    period.closed_at = None
    period.save(update_fields=["status", "closed_at", "updated_at"])

    logger.warning("Fiscal period reopened", extra={"period_id": period.id, "period_name": period.name})
    return period
