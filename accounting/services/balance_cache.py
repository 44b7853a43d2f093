# accounting/services/balance_cache.py

"""
ACCOUNT BALANCE CACHE MAINTENANCE

The AccountBalance table is a materialized convenience maintained by the
posting engine. The journal stays authoritative:
- reconcile_balances(): compare every cache row with a full recompute
- rebuild_balance_cache(): overwrite the cache from the journal
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from django.db import transaction

from accounting.models.account import Account
from accounting.models.account_balance import AccountBalance
from accounting.services.balance_service import account_totals, ledger_lines, report_snapshot
from accounting.services.money import from_minor, to_minor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceMismatch:
    account_code: str
    cached_debit: Decimal
    cached_credit: Decimal
    ledger_debit: Decimal
    ledger_credit: Decimal


@dataclass
class ReconciliationReport:
    accounts_checked: int = 0
    mismatches: list = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.mismatches


def reconcile_balances() -> ReconciliationReport:
    report = ReconciliationReport()

    with report_snapshot():
        ledger = account_totals(ledger_lines())
        cached = {
            row.account_id: (to_minor(row.debit_total), to_minor(row.credit_total))
            for row in AccountBalance.objects.all()
        }
        account_ids = sorted(set(ledger) | set(cached))
        codes = dict(Account.objects.filter(id__in=account_ids).values_list("id", "code"))

    for account_id in account_ids:
        report.accounts_checked += 1
        expected = ledger.get(account_id, (0, 0))
        actual = cached.get(account_id, (0, 0))
        if expected != actual:
            report.mismatches.append(
                BalanceMismatch(
                    account_code=codes.get(account_id, str(account_id)),
                    cached_debit=from_minor(actual[0]),
                    cached_credit=from_minor(actual[1]),
                    ledger_debit=from_minor(expected[0]),
                    ledger_credit=from_minor(expected[1]),
                )
            )

    if report.mismatches:
        logger.warning(
            "Balance cache mismatches found",
            extra={"mismatches": [m.account_code for m in report.mismatches]},
        )
    else:
        logger.info("Balance cache reconciled", extra={"accounts": report.accounts_checked})
    return report


@transaction.atomic
def rebuild_balance_cache() -> int:
    """
    Returns the number of cache rows written.
    """
    ledger = account_totals(ledger_lines())

    AccountBalance.objects.select_for_update().exclude(account_id__in=list(ledger)).update(
        debit_total=Decimal("0.00"), credit_total=Decimal("0.00")
    )

    written = 0
    for account_id in sorted(ledger):
        debit_minor, credit_minor = ledger[account_id]
        AccountBalance.objects.update_or_create(
            account_id=account_id,
            defaults={
                "debit_total": from_minor(debit_minor),
                "credit_total": from_minor(credit_minor),
            },
        )
        written += 1

    logger.info("Balance cache rebuilt", extra={"accounts": written})
    return written
