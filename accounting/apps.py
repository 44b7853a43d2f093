# accounting/apps.py

"""
ACCOUNTING APP CONFIG

Double-entry ledger core:
- Chart of accounts, fiscal periods
- Posting engine (idempotent, append-only)
- Reversals, reports, balance cache
"""

from django.apps import AppConfig


class AccountingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounting"
    verbose_name = "Accounting"
