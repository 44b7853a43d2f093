# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY MODEL

Represents a single accounting transaction (journal header).

Lifecycle:
- draft  -> editable manual entry, never counted by reports
- posted -> write-once; only posting_engine sets this status
- void   -> display flag set by reversal_service; lines stay in the ledger
            and are netted by the linked reversing entry

Guarantees:
- Idempotency via (source_type, source_id) uniqueness when both are provided
- At most one reversing entry per original (unique reverses FK)
- entry_date is the accounting effective date (used for period locks and reports)
- One-directional links only: entry -> source document ref, entry -> reversed entry
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounting.models.fiscal_period import FiscalPeriod


class JournalEntry(models.Model):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        POSTED = "posted", "Posted"
        VOID = "void", "Void"

    # Statuses whose lines count toward balances and reports.
    LEDGER_STATUSES = (Status.POSTED, Status.VOID)

    entry_date = models.DateField(help_text="Accounting effective date")

    period = models.ForeignKey(
        FiscalPeriod,
        on_delete=models.PROTECT,
        related_name="entries",
        null=True,
        blank=True,
    )

    description = models.TextField(help_text="Narrative description of the journal entry")

    reference = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Free-text reference tag (document number, memo)",
    )

    status = models.CharField(
        max_length=8,
        choices=Status.choices,
        default=Status.DRAFT,
    )

    source_type = models.CharField(max_length=50, null=True, blank=True)
    source_id = models.CharField(max_length=100, null=True, blank=True)

    counterparty = models.CharField(
        max_length=150,
        blank=True,
        default="",
        help_text="Customer/vendor name for receivable/payable open items",
    )

    due_date = models.DateField(
        null=True,
        blank=True,
        help_text="Due date of the open item created by this entry (aging)",
    )

    reverses = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        related_name="reversals",
        null=True,
        blank=True,
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="journal_entries",
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    posted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-entry_date", "-created_at"]
        indexes = [
            models.Index(fields=["entry_date"], name="journal_entry_date_idx"),
            models.Index(fields=["status"], name="journal_status_idx"),
            models.Index(fields=["status", "entry_date"], name="journal_status_date_idx"),
            models.Index(fields=["source_type", "source_id"], name="journal_source_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["source_type", "source_id"],
                condition=Q(source_type__isnull=False) & Q(source_id__isnull=False),
                name="uniq_journal_source_document",
            ),
            models.UniqueConstraint(
                fields=["reverses"],
                condition=Q(reverses__isnull=False),
                name="uniq_journal_single_reversal",
            ),
            models.CheckConstraint(
                condition=Q(status__in=["draft", "posted", "void"]),
                name="chk_journal_status_valid",
            ),
            models.CheckConstraint(
                condition=(
                    Q(source_type__isnull=True, source_id__isnull=True)
                    | Q(source_type__isnull=False, source_id__isnull=False)
                ),
                name="chk_journal_source_pair",
            ),
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"JournalEntry #{self.id} – {self.entry_date} ({self.status})"

    @property
    def is_draft(self) -> bool:
        return self.status == self.Status.DRAFT

    @property
    def is_posted(self) -> bool:
        return self.status == self.Status.POSTED

    @property
    def idempotency_key(self):
        if self.source_type and self.source_id:
            return (self.source_type, self.source_id)
        return None

    def clean(self):
        self.reference = (self.reference or "").strip()
        self.counterparty = (self.counterparty or "").strip()

        self.description = (self.description or "").strip()
        if not self.description:
            raise ValidationError("Journal entry description is required")

        st = (self.source_type or "").strip() or None
        sid = (self.source_id or "").strip() or None
        if (st is None) != (sid is None):
            raise ValidationError(
                "source_type and source_id must be provided together (or both omitted)"
            )
        self.source_type, self.source_id = st, sid

    def save(self, *args, **kwargs):
        if self.pk:
            stored = (
                JournalEntry.objects.filter(pk=self.pk)
                .values_list("status", flat=True)
                .first()
            )
            if stored is not None and stored != self.Status.DRAFT:
                raise ValidationError("Posted journal entries are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "Journal entries cannot be deleted directly; use the draft service for drafts"
        )
