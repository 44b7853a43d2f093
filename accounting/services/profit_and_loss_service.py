# accounting/services/profit_and_loss_service.py

"""
PROFIT & LOSS SERVICE (INCOME STATEMENT)

Read-only aggregation over ledger-effective journal lines in [start, end].

Sections (by account subtype):
- revenue            REVENUE  sales, service
- cost_of_sales      EXPENSE  cost_of_goods
- operating_expenses EXPENSE  operating, administrative, marketing, depreciation, tax
- other_income       REVENUE  other_income
- other_expenses     EXPENSE  other_expense

Subtotals:
- gross_profit     = revenue - cost_of_sales
- operating_income = gross_profit - operating_expenses
- net_income       = operating_income + other_income - other_expenses

Period-close entries are excluded so a closed period still reports its
activity instead of zero.
"""

from __future__ import annotations

from datetime import date

from accounting.models.account import Account
from accounting.services.balance_service import (
    account_totals,
    ledger_lines,
    report_snapshot,
    signed_minor,
)
from accounting.services.money import from_minor
from accounting.services.period_service import CLOSING_SOURCE_TYPE

SECTIONS = (
    ("revenue", Account.REVENUE, ("sales", "service")),
    ("cost_of_sales", Account.EXPENSE, ("cost_of_goods",)),
    ("operating_expenses", Account.EXPENSE, ("operating", "administrative", "marketing", "depreciation", "tax")),
    ("other_income", Account.REVENUE, ("other_income",)),
    ("other_expenses", Account.EXPENSE, ("other_expense",)),
)


def _major(minor: int) -> float:
    return float(from_minor(minor))


def _section_for(account: Account) -> str:
    for name, account_type, subtypes in SECTIONS:
        if account.account_type == account_type and account.subtype in subtypes:
            return name
    return "other_income" if account.account_type == Account.REVENUE else "other_expenses"


def generate_profit_and_loss(start: date | None = None, end: date | None = None) -> dict:
    with report_snapshot():
        totals = account_totals(
            ledger_lines(start=start, end=end, exclude_source_types=(CLOSING_SOURCE_TYPE,)).filter(
                account__account_type__in=[Account.REVENUE, Account.EXPENSE]
            )
        )
        accounts = Account.objects.filter(id__in=list(totals)).order_by("code")

        sections = {name: {"accounts": [], "total_minor": 0} for name, _, _ in SECTIONS}
        for acc in accounts:
            amount = signed_minor(acc, *totals[acc.id])
            if amount == 0:
                continue
            section = sections[_section_for(acc)]
            section["accounts"].append(
                {
                    "account_code": acc.code,
                    "account_name": acc.name,
                    "subtype": acc.subtype,
                    "amount": _major(amount),
                    "amount_minor": amount,
                }
            )
            section["total_minor"] += amount

    for section in sections.values():
        section["total"] = _major(section["total_minor"])

    gross = sections["revenue"]["total_minor"] - sections["cost_of_sales"]["total_minor"]
    operating = gross - sections["operating_expenses"]["total_minor"]
    net = operating + sections["other_income"]["total_minor"] - sections["other_expenses"]["total_minor"]

    return {
        "start": start.isoformat() if start else None,
        "end": end.isoformat() if end else None,
        **sections,
        "gross_profit": _major(gross),
        "gross_profit_minor": gross,
        "operating_income": _major(operating),
        "operating_income_minor": operating,
        "net_income": _major(net),
        "net_income_minor": net,
    }
