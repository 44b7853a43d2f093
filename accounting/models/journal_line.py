# accounting/models/journal_line.py

"""
======================================================
PATH: accounting/models/journal_line.py
======================================================
JOURNAL LINE MODEL

Atomic debit or credit posting to a single account.

Guarantees:
- Amount is always positive; direction is via entry_type (so a line can
  never carry both a debit and a credit)
- Write-once once the owning entry leaves draft
- Reporting uses entry.entry_date as the accounting timeline
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from accounting.models.account import Account
from accounting.models.journal import JournalEntry


class JournalLine(models.Model):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"

    ENTRY_TYPES = [
        (DEBIT, "Debit"),
        (CREDIT, "Credit"),
    ]

    entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        related_name="lines",
    )

    line_no = models.PositiveIntegerField(default=1)

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    entry_type = models.CharField(
        max_length=6,
        choices=ENTRY_TYPES,
    )

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Positive monetary value",
    )

    description = models.CharField(max_length=255, blank=True, default="")

    open_item = models.CharField(
        max_length=100,
        blank=True,
        default="",
        db_index=True,
        help_text="Receivable/payable item this line opens or settles (e.g. invoice:INV-1)",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Journal Line"
        verbose_name_plural = "Journal Lines"
        ordering = ["entry_id", "line_no", "id"]
        indexes = [
            models.Index(fields=["account", "entry_type"], name="jline_account_type_idx"),
            models.Index(fields=["entry", "line_no"], name="jline_entry_line_no_idx"),
            models.Index(fields=["account", "open_item"], name="jline_account_open_item_idx"),
        ]

    def __str__(self):
        return f"{self.entry_type} {self.amount} → {self.account}"

    @property
    def debit(self) -> Decimal:
        return self.amount if self.entry_type == self.DEBIT else Decimal("0.00")

    @property
    def credit(self) -> Decimal:
        return self.amount if self.entry_type == self.CREDIT else Decimal("0.00")

    def clean(self):
        if self.entry_type not in (self.DEBIT, self.CREDIT):
            raise ValidationError("Invalid entry_type")

        if self.amount is None or self.amount <= 0:
            raise ValidationError("Line amount must be > 0")

        self.description = (self.description or "").strip()
        self.open_item = (self.open_item or "").strip()

        if self.entry_id and self.entry.status != JournalEntry.Status.DRAFT:
            raise ValidationError("Lines of a posted journal entry are write-once")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.entry.status != JournalEntry.Status.DRAFT:
            raise ValidationError("Lines of a posted journal entry cannot be deleted")
        return super().delete(*args, **kwargs)
