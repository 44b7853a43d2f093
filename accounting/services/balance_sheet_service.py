# accounting/services/balance_sheet_service.py

"""
BALANCE SHEET SERVICE

Pure accounting read service.

Responsibilities:
- Compute balances per account as at a given date
- Classify balances into Assets, Liabilities, Equity
- Enforce accounting correctness (Assets = Liabilities + Equity)

Important:
- Revenue/Expense activity not yet closed to retained earnings is shown as
  "Current Period Earnings" in Equity to keep the balance sheet correct
- Contra assets (accumulated depreciation) are debit-normal asset accounts,
  so their credit balance shows as a negative asset line

Contract:
- Provide both major-unit numbers (floats, 2dp) and minor-unit ints (exact)
- Provide liabilities_plus_equity in totals for frontend convenience
"""

from __future__ import annotations

import logging
from datetime import date

from django.utils import timezone

from accounting.models.account import Account
from accounting.services.balance_service import (
    account_totals,
    ledger_lines,
    report_snapshot,
    signed_minor,
)
from accounting.services.exceptions import BalanceSheetImbalanceError
from accounting.services.money import from_minor

logger = logging.getLogger(__name__)

CURRENT_PERIOD_EARNINGS = "Current Period Earnings"


def _major(minor: int) -> float:
    return float(from_minor(minor))


def _line(acc: Account, amount: int) -> dict:
    return {
        "account_code": acc.code,
        "account_name": acc.name,
        "subtype": acc.subtype,
        "balance": _major(amount),
        "balance_minor": amount,
    }


def generate_balance_sheet(as_of: date | None = None) -> dict:
    cutoff = as_of or timezone.localdate()

    with report_snapshot():
        totals = account_totals(ledger_lines(end=cutoff))
        accounts = Account.objects.filter(id__in=list(totals)).order_by("code")

        assets, liabilities, equity = [], [], []
        total_assets = total_liabilities = total_equity = 0
        earnings = 0

        for acc in accounts:
            amount = signed_minor(acc, *totals[acc.id])

            if acc.account_type == Account.REVENUE:
                earnings += amount
                continue
            if acc.account_type == Account.EXPENSE:
                earnings -= amount
                continue
            if amount == 0:
                continue

            if acc.account_type == Account.ASSET:
                assets.append(_line(acc, amount))
                total_assets += amount
            elif acc.account_type == Account.LIABILITY:
                liabilities.append(_line(acc, amount))
                total_liabilities += amount
            else:
                equity.append(_line(acc, amount))
                total_equity += amount

    if earnings:
        equity.append(
            {
                "account_code": None,
                "account_name": CURRENT_PERIOD_EARNINGS,
                "subtype": "current_earnings",
                "balance": _major(earnings),
                "balance_minor": earnings,
            }
        )
        total_equity += earnings

    liabilities_plus_equity = total_liabilities + total_equity
    is_balanced = total_assets == liabilities_plus_equity

    if not is_balanced:
        logger.warning(
            "Balance sheet out of balance",
            extra={
                "as_of": cutoff.isoformat(),
                "assets_minor": total_assets,
                "liabilities_plus_equity_minor": liabilities_plus_equity,
            },
        )
        raise BalanceSheetImbalanceError(
            f"Balance sheet does not balance as of {cutoff}: "
            f"assets {from_minor(total_assets)} != liabilities + equity {from_minor(liabilities_plus_equity)}"
        )

    return {
        "as_of": cutoff.isoformat(),
        "assets": assets,
        "liabilities": liabilities,
        "equity": equity,
        "current_period_earnings": _major(earnings),
        "current_period_earnings_minor": earnings,
        "totals": {
            "assets": _major(total_assets),
            "liabilities": _major(total_liabilities),
            "equity": _major(total_equity),
            "liabilities_plus_equity": _major(liabilities_plus_equity),
            "assets_minor": total_assets,
            "liabilities_minor": total_liabilities,
            "equity_minor": total_equity,
            "liabilities_plus_equity_minor": liabilities_plus_equity,
        },
        "is_balanced": is_balanced,
    }
