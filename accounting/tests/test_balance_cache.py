# accounting/tests/test_balance_cache.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.account_balance import AccountBalance
from accounting.services.balance_cache import rebuild_balance_cache, reconcile_balances
from accounting.services.reversal_service import reverse_entry
from accounting.tests.utils import post_simple, seed_ledger


class BalanceCacheTests(TestCase):
    """
    GUARANTEES:
    - Posting keeps the cache equal to the journal (including reversals)
    - Drift is detected and a rebuild repairs it
    """

    def setUp(self):
        seed_ledger(2024)
        post_simple(date(2024, 6, 1), "1010", "3000", "10000.00")
        entry = post_simple(date(2024, 6, 2), "6100", "1010", "900.00")
        reverse_entry(entry.id, date(2024, 6, 3))

    def test_cache_matches_journal(self):
        report = reconcile_balances()

        self.assertTrue(report.is_clean)
        self.assertEqual(report.accounts_checked, 3)

        bank = AccountBalance.objects.get(account__code="1010")
        self.assertEqual(bank.debit_total, Decimal("10900.00"))
        self.assertEqual(bank.credit_total, Decimal("900.00"))
        self.assertEqual(bank.balance, Decimal("10000.00"))

    def test_drift_is_detected_and_rebuilt(self):
        AccountBalance.objects.filter(account__code="6100").update(debit_total=Decimal("1.00"))

        report = reconcile_balances()
        self.assertFalse(report.is_clean)
        self.assertEqual([m.account_code for m in report.mismatches], ["6100"])
        self.assertEqual(report.mismatches[0].ledger_debit, Decimal("900.00"))

        written = rebuild_balance_cache()

        self.assertEqual(written, 3)
        self.assertTrue(reconcile_balances().is_clean)
