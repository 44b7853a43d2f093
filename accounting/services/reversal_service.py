# accounting/services/reversal_service.py

"""
======================================================
PATH: accounting/services/reversal_service.py
======================================================
REVERSAL / VOID ENGINE

Corrections happen only via a compensating entry:
- New posted entry, every line's side swapped, same amounts/accounts/open items
- Dated at the reversal date (default: today) which must be in an open period
- Linked to the original via JournalEntry.reverses (unique: one reversal max)
- Original status flips to `void` for display/filtering; its lines remain in
  the ledger so original + reversal net to zero in every report

Rejections:
- AlreadyReversedError: original is `void` or already has a reversal
- NotPostedError:       original is a draft
- EntryNotFoundError:   no entry with that id

Accounts deactivated since the original was posted do not block its
reversal; balance and period checks still apply.
"""

from __future__ import annotations

import logging
from datetime import date

from django.db import transaction
from django.utils import timezone

from accounting.models.journal import JournalEntry
from accounting.models.journal_line import JournalLine
from accounting.services.entry_validator import CandidateEntry, CandidateLine, validate_entry
from accounting.services.exceptions import AlreadyReversedError, EntryNotFoundError, NotPostedError
from accounting.services.posting_engine import IdempotencyKey, post_entry

logger = logging.getLogger(__name__)

REVERSAL_SOURCE_TYPE = "reversal"


def _swapped_lines(original: JournalEntry) -> tuple[CandidateLine, ...]:
    lines = original.lines.select_related("account").order_by("line_no", "id")
    out = []
    for line in lines:
        description = line.description or ""
        if line.entry_type == JournalLine.DEBIT:
            out.append(
                CandidateLine(
                    account_code=line.account.code,
                    credit=line.amount,
                    description=description,
                    open_item=line.open_item,
                )
            )
        else:
            out.append(
                CandidateLine(
                    account_code=line.account.code,
                    debit=line.amount,
                    description=description,
                    open_item=line.open_item,
                )
            )
    return tuple(out)


@transaction.atomic
def reverse_entry(
    entry_id,
    reversal_date: date | None = None,
    *,
    created_by=None,
    reason: str = "",
) -> JournalEntry:
    original = JournalEntry.objects.select_for_update().filter(pk=entry_id).first()
    if original is None:
        raise EntryNotFoundError(f"Journal entry {entry_id} not found")

    if original.status == JournalEntry.Status.VOID or original.reversals.exists():
        logger.warning("Reversal rejected: already reversed", extra={"entry_id": original.id})
        raise AlreadyReversedError(f"Journal entry {original.id} has already been reversed")

    if original.status != JournalEntry.Status.POSTED:
        logger.warning("Reversal rejected: entry not posted", extra={"entry_id": original.id})
        raise NotPostedError(f"Journal entry {original.id} is {original.status}; only posted entries can be reversed")

    when = reversal_date or timezone.localdate()
    description = f"Reversal of JE #{original.id}: {original.description}"
    reason = (reason or "").strip()
    if reason:
        description = f"{description} ({reason})"

    candidate = CandidateEntry(
        entry_date=when,
        description=description,
        lines=_swapped_lines(original),
        reference=original.reference,
        counterparty=original.counterparty,
    )

    # ClosedPeriodError propagates here before anything is written.
    validated = validate_entry(candidate, allow_inactive_accounts=True)

    reversal = post_entry(
        validated,
        IdempotencyKey(REVERSAL_SOURCE_TYPE, str(original.id)),
        created_by=created_by,
        reverses=original,
    )

    JournalEntry.objects.filter(pk=original.pk).update(status=JournalEntry.Status.VOID)

    logger.info(
        "Journal entry reversed",
        extra={"entry_id": original.id, "reversal_id": reversal.id},
    )
    return reversal


def find_reversal(entry: JournalEntry) -> JournalEntry | None:
    return entry.reversals.first()
