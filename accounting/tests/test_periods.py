# accounting/tests/test_periods.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.fiscal_period import FiscalPeriod
from accounting.models.journal import JournalEntry
from accounting.services.balance_service import get_account_balance
from accounting.services.chart_registry import seed_default_chart
from accounting.services.entry_validator import CandidateEntry, credit_line, debit_line
from accounting.services.exceptions import ClosedPeriodError, PeriodError
from accounting.services.period_service import (
    CLOSING_SOURCE_TYPE,
    assert_period_open,
    close_period,
    create_fiscal_year,
    create_period,
    get_period_for_date,
    reopen_period,
)
from accounting.services.posting_engine import create_draft_entry, delete_draft_entry
from accounting.services.profit_and_loss_service import generate_profit_and_loss
from accounting.services.reversal_service import reverse_entry
from accounting.tests.utils import post_simple


class FiscalPeriodSetupTests(TestCase):
    """
    GUARANTEES:
    - A fiscal year is twelve non-overlapping monthly periods
    - Creating the same year twice is a no-op
    - Overlapping ranges are rejected
    """

    def test_fiscal_year_months(self):
        periods = create_fiscal_year(2024)

        self.assertEqual(len(periods), 12)
        self.assertEqual(periods[1].start_date, date(2024, 2, 1))
        self.assertEqual(periods[1].end_date, date(2024, 2, 29))
        self.assertEqual(periods[1].name, "2024-02")
        self.assertTrue(all(p.is_open for p in periods))

    def test_fiscal_year_is_idempotent(self):
        create_fiscal_year(2024)
        create_fiscal_year(2024)

        self.assertEqual(FiscalPeriod.objects.count(), 12)

    def test_overlap_is_rejected(self):
        create_period(start_date=date(2025, 1, 1), end_date=date(2025, 3, 31), name="Q1")

        with self.assertRaises(PeriodError):
            create_period(start_date=date(2025, 3, 1), end_date=date(2025, 4, 30))

    def test_inverted_range_is_rejected(self):
        with self.assertRaises(PeriodError):
            create_period(start_date=date(2025, 2, 1), end_date=date(2025, 1, 1))

    def test_date_lookup(self):
        create_fiscal_year(2024)

        self.assertEqual(get_period_for_date(date(2024, 7, 31)).name, "2024-07")
        self.assertIsNone(get_period_for_date(date(2023, 12, 31)))
        with self.assertRaises(ClosedPeriodError):
            assert_period_open(date(2023, 12, 31))


class ClosePeriodTests(TestCase):
    """
    GUARANTEES:
    - Closed periods block posting until reopened
    - Periods with drafts cannot close
    - Optional closing entry moves revenue/expense into retained earnings
    - Re-closing after a reopen sweeps only the activity posted since
    - Reversing a closing entry does not leak into the profit and loss
    """

    def setUp(self):
        seed_default_chart()
        create_fiscal_year(2024)
        self.january = get_period_for_date(date(2024, 1, 15))

    def test_close_and_reopen(self):
        close_period(self.january.id)

        with self.assertRaises(ClosedPeriodError):
            post_simple(date(2024, 1, 15), "6100", "1010", "10.00")

        with self.assertRaises(PeriodError):
            close_period(self.january.id)

        reopen_period(self.january.id)
        entry = post_simple(date(2024, 1, 15), "6100", "1010", "10.00")
        self.assertEqual(entry.period_id, self.january.id)

    def test_reopen_open_period_is_rejected(self):
        with self.assertRaises(PeriodError):
            reopen_period(self.january.id)

    def test_drafts_block_close(self):
        draft = create_draft_entry(
            CandidateEntry(
                entry_date=date(2024, 1, 20),
                description="Pending accrual",
                lines=(debit_line("6100", "10.00"), credit_line("2000", "10.00")),
            )
        )

        with self.assertRaises(PeriodError):
            close_period(self.january.id)

        delete_draft_entry(draft.id)
        closed = close_period(self.january.id)
        self.assertFalse(closed.is_open)
        self.assertIsNotNone(closed.closed_at)

    def test_closing_entry_zeroes_income_statement_accounts(self):
        post_simple(date(2024, 1, 10), "1000", "4100", "500.00")
        post_simple(date(2024, 1, 12), "6100", "1000", "200.00")

        close_period(self.january.id, post_closing_entry=True)

        closing = JournalEntry.objects.get(source_type=CLOSING_SOURCE_TYPE)
        self.assertEqual(closing.source_id, f"{self.january.id}:1")
        self.assertEqual(closing.entry_date, date(2024, 1, 31))

        self.assertEqual(get_account_balance("4100"), Decimal("0.00"))
        self.assertEqual(get_account_balance("6100"), Decimal("0.00"))
        self.assertEqual(get_account_balance("3100"), Decimal("300.00"))

    def test_closing_entry_skipped_without_activity(self):
        close_period(self.january.id, post_closing_entry=True)

        self.assertFalse(JournalEntry.objects.filter(source_type=CLOSING_SOURCE_TYPE).exists())

    def test_reclose_after_reopen_sweeps_new_activity(self):
        post_simple(date(2024, 1, 10), "1000", "4100", "500.00")
        close_period(self.january.id, post_closing_entry=True)

        reopen_period(self.january.id)
        post_simple(date(2024, 1, 20), "1000", "4100", "300.00")
        close_period(self.january.id, post_closing_entry=True)

        closings = JournalEntry.objects.filter(source_type=CLOSING_SOURCE_TYPE).order_by("id")
        self.assertEqual(
            [c.source_id for c in closings],
            [f"{self.january.id}:1", f"{self.january.id}:2"],
        )
        self.assertEqual(get_account_balance("4100", as_of=date(2024, 1, 31)), Decimal("0.00"))
        self.assertEqual(get_account_balance("3100"), Decimal("800.00"))

    def test_reversed_closing_entry_stays_out_of_profit_and_loss(self):
        post_simple(date(2024, 1, 10), "1000", "4100", "500.00")
        close_period(self.january.id, post_closing_entry=True)
        closing = JournalEntry.objects.get(source_type=CLOSING_SOURCE_TYPE)

        reverse_entry(closing.id, date(2024, 2, 5))

        february = generate_profit_and_loss(date(2024, 2, 1), date(2024, 2, 29))
        self.assertEqual(february["revenue"]["total_minor"], 0)
        self.assertEqual(february["net_income_minor"], 0)

        # The ledger itself still carries the reversal.
        self.assertEqual(get_account_balance("4100"), Decimal("500.00"))
