# accounting/services/chart_registry.py

"""
PATH: accounting/services/chart_registry.py

CHART OF ACCOUNTS REGISTRY (AUTHORITATIVE)

Answers two questions:
- "Which account code plays this role?" (pure, no DB) -> account_codes()/code_for()
- "Give me that account row"                          -> get_account()/resolve_account()

Design goals:
- deterministic: roles map to codes through DEFAULT_ACCOUNT_CODES, overridable
  per deployment with settings.ACCOUNTING_ACCOUNT_CODES
- hard-fail on missing setup (so we don't post to wrong accounts)
- accounts are never deleted once referenced; they are deactivated
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction

from accounting.models.account import Account
from accounting.services.exceptions import AccountResolutionError

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# SEMANTIC ROLES -> DEFAULT CODES
# ------------------------------------------------------------

DEFAULT_ACCOUNT_CODES = {
    "CASH": "1000",
    "BANK": "1010",
    "AR": "1200",
    "INVENTORY": "1300",
    "FIXED_ASSETS": "1500",
    "ACCUMULATED_DEPRECIATION": "1590",
    "AP": "2000",
    "TAX_PAYABLE": "2200",
    "OWNER_CAPITAL": "3000",
    "RETAINED_EARNINGS": "3100",
    "SALES_REVENUE": "4100",
    "GAIN_ON_DISPOSAL": "4900",
    "COGS": "5100",
    "INVENTORY_ADJUSTMENT": "5900",
    "OPERATING_EXPENSE": "6000",
    "DEPRECIATION_EXPENSE": "6500",
    "LOSS_ON_DISPOSAL": "8920",
}

# Seed definitions for the default chart: code -> (name, type, subtype)
DEFAULT_CHART = {
    "1000": ("Cash", Account.ASSET, "cash"),
    "1010": ("Bank", Account.ASSET, "bank"),
    "1200": ("Accounts Receivable", Account.ASSET, "receivable"),
    "1300": ("Inventory Asset", Account.ASSET, "inventory"),
    "1500": ("Fixed Assets", Account.ASSET, "fixed_asset"),
    "1590": ("Accumulated Depreciation", Account.ASSET, "accumulated_depreciation"),
    "2000": ("Accounts Payable", Account.LIABILITY, "payable"),
    "2200": ("Sales Tax Payable", Account.LIABILITY, "tax_payable"),
    "3000": ("Owner's Capital", Account.EQUITY, "capital"),
    "3100": ("Retained Earnings", Account.EQUITY, "retained_earnings"),
    "4100": ("Sales Revenue", Account.REVENUE, "sales"),
    "4200": ("Service Revenue", Account.REVENUE, "service"),
    "4900": ("Gain on Asset Disposal", Account.REVENUE, "other_income"),
    "5100": ("Cost of Goods Sold", Account.EXPENSE, "cost_of_goods"),
    "5900": ("Inventory Adjustments", Account.EXPENSE, "cost_of_goods"),
    "6000": ("General Operating Expenses", Account.EXPENSE, "operating"),
    "6100": ("Rent Expense", Account.EXPENSE, "operating"),
    "6200": ("Office Supplies", Account.EXPENSE, "administrative"),
    "6300": ("Advertising", Account.EXPENSE, "marketing"),
    "6500": ("Depreciation Expense", Account.EXPENSE, "depreciation"),
    "8920": ("Loss on Asset Disposal", Account.EXPENSE, "other_expense"),
}


def account_codes() -> dict:
    """Role -> code mapping with deployment overrides applied. No DB access."""
    overrides = getattr(settings, "ACCOUNTING_ACCOUNT_CODES", None) or {}
    codes = dict(DEFAULT_ACCOUNT_CODES)
    for role, code in overrides.items():
        role_key = str(role).strip().upper()
        code_val = str(code or "").strip()
        if role_key and code_val:
            codes[role_key] = code_val
    return codes


def code_for(role: str, codes: dict | None = None) -> str:
    mapping = codes if codes is not None else account_codes()
    key = (role or "").strip().upper()
    code = mapping.get(key)
    if not code:
        raise AccountResolutionError(f"No account code configured for role '{role}'")
    return code


def get_account(code: str, *, require_active: bool = True) -> Account:
    code = (code or "").strip()
    if not code:
        logger.error("Account resolution failed: empty account code provided")
        raise AccountResolutionError("Account code is required")

    account = Account.objects.filter(code=code).first()
    if account is None:
        logger.error("Account resolution failed: code not found", extra={"code": code})
        raise AccountResolutionError(f"Account {code} does not exist")

    if require_active and not account.is_active:
        raise AccountResolutionError(f"Account {code} is inactive")

    return account


def resolve_account(role: str, *, require_active: bool = True) -> Account:
    return get_account(code_for(role), require_active=require_active)


def is_account_referenced(account: Account) -> bool:
    return account.is_referenced()


@transaction.atomic
def create_account(
    *,
    code: str,
    name: str,
    account_type: str,
    subtype: str = "",
    is_active: bool = True,
) -> Account:
    account = Account.objects.create(
        code=code,
        name=name,
        account_type=account_type,
        subtype=subtype,
        is_active=is_active,
    )
    logger.info("Account created", extra={"code": account.code})
    return account


def _set_active(code: str, active: bool) -> Account:
    account = get_account(code, require_active=False)
    if account.is_active != active:
        account.is_active = active
        account.save(update_fields=["is_active", "updated_at"])
        logger.info(
            "Account %s", "reactivated" if active else "deactivated",
            extra={"code": account.code},
        )
    return account


def deactivate_account(code: str) -> Account:
    return _set_active(code, False)


def reactivate_account(code: str) -> Account:
    return _set_active(code, True)


@transaction.atomic
def seed_default_chart() -> tuple[int, int]:
    """Create missing default accounts. Returns (created, existing)."""
    created = existing = 0
    for code, (name, account_type, subtype) in DEFAULT_CHART.items():
        _, was_created = Account.objects.get_or_create(
            code=code,
            defaults={"name": name, "account_type": account_type, "subtype": subtype},
        )
        if was_created:
            created += 1
        else:
            existing += 1
    return created, existing
