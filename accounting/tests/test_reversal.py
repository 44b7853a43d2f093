# accounting/tests/test_reversal.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.journal import JournalEntry
from accounting.services.balance_service import get_account_balance
from accounting.services.entry_validator import CandidateEntry, credit_line, debit_line
from accounting.services.chart_registry import deactivate_account
from accounting.services.exceptions import (
    AlreadyReversedError,
    ClosedPeriodError,
    EntryNotFoundError,
    InactiveOrUnknownAccountError,
    NotPostedError,
)
from accounting.services.period_service import close_period, get_period_for_date
from accounting.services.posting_engine import create_draft_entry
from accounting.services.reversal_service import REVERSAL_SOURCE_TYPE, find_reversal, reverse_entry
from accounting.tests.utils import post_simple, seed_ledger


class ReverseEntryTests(TestCase):
    """
    GUARANTEES:
    - A reversal swaps every line and links back to the original
    - Original becomes void but original + reversal net to zero
    - An entry is reversed at most once
    - Reversal respects period locks at the reversal date
    - A deactivated account never traps an entry that already hit it
    """

    def setUp(self):
        seed_ledger(2024)
        self.original = post_simple(
            date(2024, 4, 5), "6200", "1000", "80.00", description="Printer paper"
        )

    def test_reversal_swaps_lines_and_voids_original(self):
        reversal = reverse_entry(self.original.id, date(2024, 4, 20), reason="duplicate")

        self.original.refresh_from_db()
        self.assertEqual(self.original.status, JournalEntry.Status.VOID)
        self.assertEqual(reversal.status, JournalEntry.Status.POSTED)
        self.assertEqual(reversal.reverses_id, self.original.id)
        self.assertEqual(reversal.source_type, REVERSAL_SOURCE_TYPE)
        self.assertEqual(reversal.source_id, str(self.original.id))
        self.assertEqual(reversal.entry_date, date(2024, 4, 20))
        self.assertEqual(
            reversal.description,
            f"Reversal of JE #{self.original.id}: Printer paper (duplicate)",
        )

        lines = list(reversal.lines.select_related("account").order_by("line_no"))
        self.assertEqual(lines[0].account.code, "6200")
        self.assertEqual(lines[0].credit, Decimal("80.00"))
        self.assertEqual(lines[1].account.code, "1000")
        self.assertEqual(lines[1].debit, Decimal("80.00"))

        self.assertEqual(find_reversal(self.original), reversal)

    def test_balances_net_to_zero(self):
        reverse_entry(self.original.id, date(2024, 4, 20))

        self.assertEqual(get_account_balance("6200"), Decimal("0.00"))
        self.assertEqual(get_account_balance("1000"), Decimal("0.00"))
        # Before the reversal date the original still counts.
        self.assertEqual(get_account_balance("6200", as_of=date(2024, 4, 10)), Decimal("80.00"))

    def test_second_reversal_is_rejected(self):
        reverse_entry(self.original.id, date(2024, 4, 20))

        with self.assertRaises(AlreadyReversedError):
            reverse_entry(self.original.id, date(2024, 4, 21))

        self.assertEqual(JournalEntry.objects.filter(reverses=self.original).count(), 1)

    def test_draft_cannot_be_reversed(self):
        draft = create_draft_entry(
            CandidateEntry(
                entry_date=date(2024, 4, 6),
                description="Not yet posted",
                lines=(debit_line("6200", "5.00"), credit_line("1000", "5.00")),
            )
        )

        with self.assertRaises(NotPostedError):
            reverse_entry(draft.id, date(2024, 4, 7))

    def test_unknown_entry(self):
        with self.assertRaises(EntryNotFoundError):
            reverse_entry(424242, date(2024, 4, 7))

    def test_reversal_into_closed_period_is_blocked(self):
        close_period(get_period_for_date(date(2024, 4, 30)).id)

        with self.assertRaises(ClosedPeriodError):
            reverse_entry(self.original.id, date(2024, 4, 30))

        self.original.refresh_from_db()
        self.assertEqual(self.original.status, JournalEntry.Status.POSTED)

    def test_original_in_closed_period_reversed_in_open_one(self):
        close_period(get_period_for_date(date(2024, 4, 30)).id)

        reversal = reverse_entry(self.original.id, date(2024, 5, 2))

        self.assertEqual(reversal.period.name, "2024-05")
        self.assertEqual(get_account_balance("6200"), Decimal("0.00"))

    def test_deactivated_account_does_not_block_reversal(self):
        deactivate_account("6200")

        with self.assertRaises(InactiveOrUnknownAccountError):
            post_simple(date(2024, 4, 8), "6200", "1000", "1.00")

        reverse_entry(self.original.id, date(2024, 4, 9))

        self.original.refresh_from_db()
        self.assertEqual(self.original.status, JournalEntry.Status.VOID)
        self.assertEqual(get_account_balance("6200"), Decimal("0.00"))
