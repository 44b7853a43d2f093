# accounting/models/account_balance.py

"""
MATERIALIZED ACCOUNT BALANCE (READ OPTIMIZATION ONLY)

One row per account holding cumulative debit/credit totals of ledger-effective
lines. Maintained by posting_engine under row locks; never read by reports and
always reconcilable against the journal via balance_cache.reconcile_balances().
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from accounting.models.account import Account


class AccountBalance(models.Model):
    account = models.OneToOneField(
        Account,
        on_delete=models.PROTECT,
        related_name="balance_cache",
    )

    debit_total = models.DecimalField(max_digits=16, decimal_places=2, default=Decimal("0.00"))
    credit_total = models.DecimalField(max_digits=16, decimal_places=2, default=Decimal("0.00"))

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["account__code"]
        verbose_name = "Account Balance (cache)"
        verbose_name_plural = "Account Balances (cache)"

    def __str__(self):
        return f"{self.account.code}: Dr {self.debit_total} / Cr {self.credit_total}"

    @property
    def balance(self) -> Decimal:
        if self.account.is_debit_normal:
            return self.debit_total - self.credit_total
        return self.credit_total - self.debit_total
