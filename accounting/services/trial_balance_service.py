# accounting/services/trial_balance_service.py

from __future__ import annotations

from datetime import date

from django.utils import timezone

from accounting.models.account import Account
from accounting.models.fiscal_period import FiscalPeriod
from accounting.services.balance_service import account_totals, ledger_lines, report_snapshot
from accounting.services.exceptions import PeriodError
from accounting.services.money import from_minor


def _major(minor: int) -> float:
    return float(from_minor(minor))


class TrialBalanceService:
    """
    Trial Balance computation service.

    Guarantees:
    - Cumulative to the cut-off date (period end or as_of, default today)
    - Every account with ledger activity appears, inactive ones included
    - Net balance per account in its debit OR credit column
    - Aggregates in bulk (no N+1), sums in integer minor units
    - Returns JSON-safe numeric values (floats + exact minor ints)
    """

    def __init__(self, account_model=Account):
        self.Account = account_model

    def generate(self, *, period: FiscalPeriod | None = None, as_of: date | None = None) -> dict:
        if period is not None:
            cutoff = period.end_date
        else:
            cutoff = as_of or timezone.localdate()

        with report_snapshot():
            totals = account_totals(ledger_lines(end=cutoff))
            accounts = self.Account.objects.filter(id__in=list(totals)).order_by("code")

            rows = []
            total_debit = 0
            total_credit = 0

            for acc in accounts:
                debit_minor, credit_minor = totals[acc.id]
                net = debit_minor - credit_minor
                debit = net if net > 0 else 0
                credit = -net if net < 0 else 0

                rows.append(
                    {
                        "account_id": acc.id,
                        "account_code": acc.code,
                        "account_name": acc.name,
                        "account_type": acc.account_type,
                        "debit": _major(debit),
                        "credit": _major(credit),
                        "debit_minor": debit,
                        "credit_minor": credit,
                    }
                )
                total_debit += debit
                total_credit += credit

        return {
            "as_of": cutoff.isoformat(),
            "period": period.name if period is not None else None,
            "accounts": rows,
            "totals": {
                "debit": _major(total_debit),
                "credit": _major(total_credit),
                "debit_minor": total_debit,
                "credit_minor": total_credit,
                "difference_minor": total_debit - total_credit,
                "balanced": total_debit == total_credit,
            },
        }


def get_trial_balance(period_id=None, *, as_of: date | None = None) -> dict:
    period = None
    if period_id is not None:
        period = FiscalPeriod.objects.filter(pk=period_id).first()
        if period is None:
            raise PeriodError(f"Fiscal period {period_id} not found")
    return TrialBalanceService().generate(period=period, as_of=as_of)
