# accounting/models/account.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Account(models.Model):
    """
    A single account in the chart of accounts.

    Guarantees:
    - Account codes are globally unique and stable
    - Code + name are normalized (trimmed)
    - Once referenced by a ledger-effective line, code/type/subtype are frozen
    - Never deleted while referenced (deactivate instead)
    """

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"

    ACCOUNT_TYPES = [
        (ASSET, "Asset"),
        (LIABILITY, "Liability"),
        (EQUITY, "Equity"),
        (REVENUE, "Revenue"),
        (EXPENSE, "Expense"),
    ]

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"

    DEBIT_NORMAL_TYPES = (ASSET, EXPENSE)

    # Report grouping. Subtypes drive balance sheet / P&L sections.
    SUBTYPES_BY_TYPE = {
        ASSET: (
            "cash",
            "bank",
            "receivable",
            "inventory",
            "fixed_asset",
            "accumulated_depreciation",
            "other_asset",
        ),
        LIABILITY: ("payable", "tax_payable", "accrued", "loan", "other_liability"),
        EQUITY: ("capital", "retained_earnings", "other_equity"),
        REVENUE: ("sales", "service", "other_income"),
        EXPENSE: (
            "cost_of_goods",
            "operating",
            "administrative",
            "marketing",
            "depreciation",
            "tax",
            "other_expense",
        ),
    }

    DEFAULT_SUBTYPES = {
        ASSET: "other_asset",
        LIABILITY: "other_liability",
        EQUITY: "other_equity",
        REVENUE: "sales",
        EXPENSE: "operating",
    }

    FROZEN_WHEN_REFERENCED = ("code", "account_type", "subtype")

    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=150)

    account_type = models.CharField(
        max_length=20,
        choices=ACCOUNT_TYPES,
    )

    subtype = models.CharField(
        max_length=32,
        blank=True,
        default="",
        help_text="Report grouping (e.g. receivable, cost_of_goods, operating)",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        indexes = [
            models.Index(fields=["account_type"], name="account_type_idx"),
            models.Index(fields=["is_active"], name="account_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(code=""),
                name="chk_account_code_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_account_name_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    @property
    def normal_balance(self) -> str:
        if self.account_type in self.DEBIT_NORMAL_TYPES:
            return self.DEBIT
        return self.CREDIT

    @property
    def is_debit_normal(self) -> bool:
        return self.normal_balance == self.DEBIT

    def is_referenced(self) -> bool:
        if not self.pk:
            return False
        return self.journal_lines.exclude(entry__status="draft").exists()

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()
        self.subtype = (self.subtype or "").strip().lower()

        if not self.code:
            raise ValidationError("Account code is required")
        if not self.name:
            raise ValidationError("Account name is required")

        if self.account_type not in dict(self.ACCOUNT_TYPES):
            raise ValidationError({"account_type": "Invalid account type"})

        if not self.subtype:
            self.subtype = self.DEFAULT_SUBTYPES[self.account_type]
        elif self.subtype not in self.SUBTYPES_BY_TYPE[self.account_type]:
            raise ValidationError(
                {"subtype": f"Subtype '{self.subtype}' is not valid for {self.account_type}"}
            )

        if self.pk and self.is_referenced():
            stored = (
                Account.objects.filter(pk=self.pk)
                .values(*self.FROZEN_WHEN_REFERENCED)
                .first()
            )
            if stored:
                changed = [
                    f for f in self.FROZEN_WHEN_REFERENCED if stored[f] != getattr(self, f)
                ]
                if changed:
                    raise ValidationError(
                        f"Account {stored['code']} is referenced by posted lines; "
                        f"cannot change {', '.join(changed)}"
                    )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.is_referenced() or self.journal_lines.exists():
            raise ValidationError(
                f"Account {self.code} is referenced by journal lines; deactivate it instead"
            )
        return super().delete(*args, **kwargs)
