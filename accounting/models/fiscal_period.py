# accounting/models/fiscal_period.py

"""
======================================================
PATH: accounting/models/fiscal_period.py
======================================================
FISCAL PERIOD MODEL

A date range that can be independently opened/closed to new postings.

Hard rules:
- end_date >= start_date
- Periods never overlap
- Status changes go through period_service (close/reopen), never ad-hoc edits
  of the date range once entries exist inside it
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q


class FiscalPeriod(models.Model):
    class Status(models.TextChoices):
        OPEN = "open", "Open"
        CLOSED = "closed", "Closed"

    name = models.CharField(max_length=64, blank=True, default="")

    start_date = models.DateField()
    end_date = models.DateField()

    status = models.CharField(
        max_length=8,
        choices=Status.choices,
        default=Status.OPEN,
        db_index=True,
    )

    closed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_date"]
        indexes = [
            models.Index(fields=["start_date", "end_date"], name="fiscal_period_range_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["start_date", "end_date"],
                name="uniq_fiscal_period_start_end",
            ),
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="chk_fiscal_period_end_gte_start",
            ),
        ]
        verbose_name = "Fiscal Period"
        verbose_name_plural = "Fiscal Periods"

    def __str__(self):
        label = self.name or f"{self.start_date} → {self.end_date}"
        return f"{label} ({self.status})"

    @property
    def is_open(self) -> bool:
        return self.status == self.Status.OPEN

    def contains(self, day) -> bool:
        return self.start_date <= day <= self.end_date

    def clean(self):
        self.name = (self.name or "").strip()

        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "end_date must be >= start_date"})

        if self.start_date and self.end_date:
            overlapping = FiscalPeriod.objects.filter(
                start_date__lte=self.end_date,
                end_date__gte=self.start_date,
            )
            if self.pk:
                overlapping = overlapping.exclude(pk=self.pk)

            if overlapping.exists():
                raise ValidationError(
                    {
                        "start_date": "This period overlaps an existing fiscal period.",
                        "end_date": "This period overlaps an existing fiscal period.",
                    }
                )

        if not self.name and self.start_date and self.end_date:
            self.name = f"{self.start_date:%Y-%m}" if (
                self.start_date.year == self.end_date.year
                and self.start_date.month == self.end_date.month
            ) else f"{self.start_date.isoformat()}..{self.end_date.isoformat()}"

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.entries.exists():
            raise ValidationError("Fiscal periods with journal entries cannot be deleted")
        return super().delete(*args, **kwargs)
