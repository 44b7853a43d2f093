# accounting/services/posting_engine.py

"""
======================================================
PATH: accounting/services/posting_engine.py
======================================================
POSTING ENGINE (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Mark a JournalEntry `posted`
- Create JournalLine rows of a posted entry
- Apply balance deltas to the AccountBalance cache
- Enforce idempotency per source document (at-most-once posting)

Everything else (documents, reversals, period close) must pass through here.

Concurrency:
- One transaction.atomic block per posting: entry + lines + balance deltas
- AccountBalance rows are locked (select_for_update) in account-id order so two
  postings touching the same account serialize instead of losing an update
- The (source_type, source_id) unique constraint decides duplicate retries;
  the loser of an insert race gets the winner's entry back
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.account_balance import AccountBalance
from accounting.models.journal import JournalEntry
from accounting.models.journal_line import JournalLine
from accounting.services.entry_validator import (
    CandidateEntry,
    CandidateLine,
    ValidatedEntry,
    validate_entry,
)
from accounting.services.exceptions import (
    EntryNotFoundError,
    InactiveOrUnknownAccountError,
    JournalEntryCreationError,
    MalformedLineError,
    NotPostedError,
)
from accounting.services.money import from_minor, money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdempotencyKey:
    document_type: str
    document_id: str

    def __post_init__(self):
        dt = str(self.document_type or "").strip()
        did = str(self.document_id or "").strip()
        if not dt or not did:
            raise JournalEntryCreationError("Idempotency key needs document_type and document_id")
        object.__setattr__(self, "document_type", dt)
        object.__setattr__(self, "document_id", did)

    def __str__(self):
        return f"{self.document_type}:{self.document_id}"


def find_entry_by_key(key: IdempotencyKey | None) -> JournalEntry | None:
    if key is None:
        return None
    return JournalEntry.objects.filter(
        source_type=key.document_type, source_id=key.document_id
    ).first()


def _apply_balance_deltas(lines) -> None:
    """
    lines: iterable of (account_id, is_debit, amount_minor)
    """
    debit_by_account: dict[int, int] = defaultdict(int)
    credit_by_account: dict[int, int] = defaultdict(int)
    for account_id, is_debit, amount_minor in lines:
        if is_debit:
            debit_by_account[account_id] += amount_minor
        else:
            credit_by_account[account_id] += amount_minor

    account_ids = sorted(set(debit_by_account) | set(credit_by_account))

    existing = set(
        AccountBalance.objects.filter(account_id__in=account_ids).values_list("account_id", flat=True)
    )
    missing = [aid for aid in account_ids if aid not in existing]
    if missing:
        AccountBalance.objects.bulk_create(
            [AccountBalance(account_id=aid) for aid in missing],
            ignore_conflicts=True,
        )

    locked = (
        AccountBalance.objects.select_for_update()
        .filter(account_id__in=account_ids)
        .order_by("account_id")
    )
    for row in locked:
        row.debit_total = money(row.debit_total + from_minor(debit_by_account[row.account_id]))
        row.credit_total = money(row.credit_total + from_minor(credit_by_account[row.account_id]))
        row.save(update_fields=["debit_total", "credit_total", "updated_at"])


def _build_lines(entry: JournalEntry, validated: ValidatedEntry) -> list[JournalLine]:
    return [
        JournalLine(
            entry=entry,
            line_no=index,
            account=line.account,
            entry_type=JournalLine.DEBIT if line.is_debit else JournalLine.CREDIT,
            amount=line.amount,
            description=line.description[:255],
            open_item=line.open_item[:100],
        )
        for index, line in enumerate(validated.lines, start=1)
    ]


def post_entry(
    validated: ValidatedEntry,
    idempotency_key: IdempotencyKey | None = None,
    *,
    created_by=None,
    reverses: JournalEntry | None = None,
) -> JournalEntry:
    """
    Persist a validated entry as `posted`.

    Idempotent per key: a second call with the same key returns the first
    entry unchanged and applies no balance delta.
    """
    entry, _ = post_or_get_entry(
        validated, idempotency_key, created_by=created_by, reverses=reverses
    )
    return entry


def post_or_get_entry(
    validated: ValidatedEntry,
    idempotency_key: IdempotencyKey | None = None,
    *,
    created_by=None,
    reverses: JournalEntry | None = None,
) -> tuple[JournalEntry, bool]:
    """
    Same as post_entry() but also reports whether THIS call created the entry
    (False on an idempotent replay or a lost insert race).
    """
    if not isinstance(validated, ValidatedEntry):
        raise JournalEntryCreationError("post_entry requires a ValidatedEntry (run validate_entry first)")

    existing = find_entry_by_key(idempotency_key)
    if existing is not None:
        logger.info(
            "Idempotent replay: entry already posted for key",
            extra={"key": str(idempotency_key), "entry_id": existing.id},
        )
        return existing, False

    try:
        with transaction.atomic():
            entry = _insert_posted_entry(validated, idempotency_key, created_by, reverses)
    except (IntegrityError, ValidationError) as exc:
        winner = find_entry_by_key(idempotency_key)
        if winner is not None:
            logger.info(
                "Concurrent duplicate posting resolved to existing entry",
                extra={"key": str(idempotency_key), "entry_id": winner.id},
            )
            return winner, False
        if isinstance(exc, ValidationError):
            raise JournalEntryCreationError(f"Failed to create journal entry: {exc}") from exc
        raise

    logger.info(
        "Journal entry posted",
        extra={
            "entry_id": entry.id,
            "key": str(idempotency_key) if idempotency_key else None,
            "total": str(validated.total),
        },
    )
    return entry, True


def _insert_posted_entry(validated, idempotency_key, created_by, reverses) -> JournalEntry:
    entry = JournalEntry.objects.create(
        entry_date=validated.entry_date,
        period=validated.period,
        description=validated.description,
        reference=validated.reference,
        counterparty=validated.counterparty,
        due_date=validated.due_date,
        status=JournalEntry.Status.POSTED,
        source_type=idempotency_key.document_type if idempotency_key else None,
        source_id=idempotency_key.document_id if idempotency_key else None,
        reverses=reverses,
        created_by=created_by,
        posted_at=timezone.now(),
    )

    JournalLine.objects.bulk_create(_build_lines(entry, validated))
    _apply_balance_deltas(
        (line.account.id, line.is_debit, line.amount_minor) for line in validated.lines
    )
    return entry


# ============================================================
# MANUAL (DRAFT) ENTRIES
# ============================================================

def _write_draft_lines(entry: JournalEntry, candidate: CandidateEntry) -> None:
    codes = {(line.account_code or "").strip() for line in candidate.lines}
    accounts = {a.code: a for a in Account.objects.filter(code__in=codes)}

    for index, line in enumerate(candidate.lines, start=1):
        code = (line.account_code or "").strip()
        account = accounts.get(code)
        if account is None:
            raise InactiveOrUnknownAccountError(f"Unknown account code: {code}", line_index=index - 1)

        try:
            debit = money(line.debit)
            credit = money(line.credit)
        except ValueError as exc:
            raise MalformedLineError(str(exc), line_index=index - 1) from exc
        if (debit > 0) == (credit > 0) or debit < 0 or credit < 0:
            raise MalformedLineError(
                f"Line {index - 1}: exactly one of debit/credit must be > 0", line_index=index - 1
            )

        JournalLine.objects.create(
            entry=entry,
            line_no=index,
            account=account,
            entry_type=JournalLine.DEBIT if debit > 0 else JournalLine.CREDIT,
            amount=debit if debit > 0 else credit,
            description=(line.description or "")[:255],
            open_item=(line.open_item or "")[:100],
        )


@transaction.atomic
def create_draft_entry(candidate: CandidateEntry, *, created_by=None) -> JournalEntry:
    """
    Save a manual entry as `draft`. Drafts never touch balances and are not
    balance-checked until post_draft_entry().
    """
    from accounting.services.period_service import get_period_for_date

    entry = JournalEntry.objects.create(
        entry_date=candidate.entry_date,
        period=get_period_for_date(candidate.entry_date),
        description=candidate.description,
        reference=candidate.reference,
        counterparty=candidate.counterparty,
        due_date=candidate.due_date,
        status=JournalEntry.Status.DRAFT,
        created_by=created_by,
    )
    _write_draft_lines(entry, candidate)
    return entry


def _lock_draft(entry_id) -> JournalEntry:
    entry = JournalEntry.objects.select_for_update().filter(pk=entry_id).first()
    if entry is None:
        raise EntryNotFoundError(f"Journal entry {entry_id} not found")
    if entry.status != JournalEntry.Status.DRAFT:
        raise NotPostedError(f"Journal entry {entry_id} is {entry.status}, not a draft")
    return entry


@transaction.atomic
def update_draft_entry(entry_id, candidate: CandidateEntry) -> JournalEntry:
    from accounting.services.period_service import get_period_for_date

    entry = _lock_draft(entry_id)
    entry.entry_date = candidate.entry_date
    entry.period = get_period_for_date(candidate.entry_date)
    entry.description = candidate.description
    entry.reference = candidate.reference
    entry.counterparty = candidate.counterparty
    entry.due_date = candidate.due_date
    entry.save()

    JournalLine.objects.filter(entry=entry).delete()
    _write_draft_lines(entry, candidate)
    return entry


@transaction.atomic
def delete_draft_entry(entry_id) -> None:
    entry = _lock_draft(entry_id)
    JournalLine.objects.filter(entry=entry).delete()
    JournalEntry.objects.filter(pk=entry.pk).delete()
    logger.info("Draft journal entry deleted", extra={"entry_id": entry_id})


def draft_to_candidate(entry: JournalEntry) -> CandidateEntry:
    lines = tuple(
        _candidate_line_from(line) for line in entry.lines.select_related("account").order_by("line_no", "id")
    )
    return CandidateEntry(
        entry_date=entry.entry_date,
        description=entry.description,
        lines=lines,
        reference=entry.reference,
        counterparty=entry.counterparty,
        due_date=entry.due_date,
    )


def _candidate_line_from(line: JournalLine) -> CandidateLine:
    return CandidateLine(
        account_code=line.account.code,
        debit=line.debit if line.entry_type == JournalLine.DEBIT else None,
        credit=line.credit if line.entry_type == JournalLine.CREDIT else None,
        description=line.description,
        open_item=line.open_item,
    )


@transaction.atomic
def post_draft_entry(entry_id, *, posted_by=None) -> JournalEntry:
    """
    draft -> posted (irreversible). Re-validates the stored lines, then applies
    balance deltas in the same transaction.
    """
    entry = _lock_draft(entry_id)
    validated = validate_entry(draft_to_candidate(entry))

    updates = {
        "status": JournalEntry.Status.POSTED,
        "period": validated.period,
        "posted_at": timezone.now(),
    }
    if entry.created_by_id is None and posted_by is not None:
        updates["created_by"] = posted_by
    JournalEntry.objects.filter(pk=entry.pk).update(**updates)
    _apply_balance_deltas(
        (line.account.id, line.is_debit, line.amount_minor) for line in validated.lines
    )

    entry.refresh_from_db()
    logger.info("Draft journal entry posted", extra={"entry_id": entry.id})
    return entry
