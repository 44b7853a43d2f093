# accounting/tests/utils.py

"""
Shared setup for ledger tests: default chart, a fiscal year of monthly
periods, a user carrying explicit model permissions.
"""

from __future__ import annotations

from datetime import date

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission

from accounting.services.chart_registry import seed_default_chart
from accounting.services.entry_validator import CandidateEntry, credit_line, debit_line, validate_entry
from accounting.services.period_service import create_fiscal_year
from accounting.services.posting_engine import IdempotencyKey, post_entry

User = get_user_model()


def seed_ledger(year: int = 2024):
    seed_default_chart()
    return create_fiscal_year(year)


def post_simple(
    entry_date: date,
    debit_code: str,
    credit_code: str,
    amount,
    *,
    key: tuple[str, str] | None = None,
    description: str = "Test entry",
):
    candidate = CandidateEntry(
        entry_date=entry_date,
        description=description,
        lines=(debit_line(debit_code, amount), credit_line(credit_code, amount)),
    )
    return post_entry(validate_entry(candidate), IdempotencyKey(*key) if key else None)


def user_with_perms(username: str, *perms: str):
    """perms: "app_label.codename" strings."""
    user = User.objects.create_user(username=username, password="password123")
    for perm in perms:
        app_label, codename = perm.split(".", 1)
        user.user_permissions.add(
            Permission.objects.get(content_type__app_label=app_label, codename=codename)
        )
    return User.objects.get(pk=user.pk)
