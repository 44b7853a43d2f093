# accounting/tests/test_entry_validator.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.journal import JournalEntry
from accounting.services.chart_registry import deactivate_account
from accounting.services.entry_validator import (
    CandidateEntry,
    CandidateLine,
    credit_line,
    debit_line,
    validate_entry,
)
from accounting.services.exceptions import (
    ClosedPeriodError,
    InactiveOrUnknownAccountError,
    MalformedLineError,
    UnbalancedEntryError,
)
from accounting.services.period_service import close_period, get_period_for_date
from accounting.tests.utils import seed_ledger


def _entry(*lines, entry_date=date(2024, 3, 10), description="Office rent"):
    return CandidateEntry(entry_date=entry_date, description=description, lines=tuple(lines))


class EntryValidatorTests(TestCase):
    """
    GUARANTEES:
    - Malformed lines, unknown/inactive accounts, imbalance and closed periods
      are each rejected with their own error
    - Validation never writes
    """

    def setUp(self):
        seed_ledger(2024)

    def test_balanced_entry_is_validated(self):
        validated = validate_entry(
            _entry(debit_line("6100", "1500.00"), credit_line("1010", "1500.00"))
        )

        self.assertEqual(validated.total, Decimal("1500.00"))
        self.assertEqual(validated.total_minor, 150000)
        self.assertEqual(validated.period, get_period_for_date(date(2024, 3, 10)))
        self.assertEqual([line.is_debit for line in validated.lines], [True, False])
        self.assertEqual(JournalEntry.objects.count(), 0)

    def test_many_to_many_lines_balance(self):
        validated = validate_entry(
            _entry(
                debit_line("6100", "100.00"),
                debit_line("6200", "25.50"),
                credit_line("1000", "50.00"),
                credit_line("1010", "75.50"),
            )
        )
        self.assertEqual(validated.total, Decimal("125.50"))

    def test_single_line_is_malformed(self):
        with self.assertRaises(MalformedLineError):
            validate_entry(_entry(debit_line("6100", "10.00")))

    def test_line_with_debit_and_credit_is_malformed(self):
        with self.assertRaises(MalformedLineError) as ctx:
            validate_entry(
                _entry(
                    CandidateLine(account_code="6100", debit="10.00", credit="10.00"),
                    credit_line("1010", "10.00"),
                )
            )
        self.assertEqual(ctx.exception.line_index, 0)

    def test_line_with_neither_side_is_malformed(self):
        with self.assertRaises(MalformedLineError) as ctx:
            validate_entry(_entry(debit_line("6100", "10.00"), CandidateLine(account_code="1010")))
        self.assertEqual(ctx.exception.line_index, 1)

    def test_negative_amount_is_malformed(self):
        with self.assertRaises(MalformedLineError):
            validate_entry(_entry(debit_line("6100", "-10.00"), credit_line("1010", "-10.00")))

    def test_sub_cent_precision_is_malformed(self):
        with self.assertRaises(MalformedLineError):
            validate_entry(_entry(debit_line("6100", "10.005"), credit_line("1010", "10.005")))

    def test_blank_description_is_malformed(self):
        with self.assertRaises(MalformedLineError):
            validate_entry(
                _entry(debit_line("6100", "10.00"), credit_line("1010", "10.00"), description="   ")
            )

    def test_malformed_is_reported_before_unknown_account(self):
        with self.assertRaises(MalformedLineError):
            validate_entry(
                _entry(
                    CandidateLine(account_code="9999", debit="1.00", credit="1.00"),
                    credit_line("1010", "1.00"),
                )
            )

    def test_unknown_account_is_rejected(self):
        with self.assertRaises(InactiveOrUnknownAccountError):
            validate_entry(_entry(debit_line("9999", "10.00"), credit_line("1010", "10.00")))

    def test_inactive_account_is_rejected(self):
        deactivate_account("6300")

        with self.assertRaises(InactiveOrUnknownAccountError):
            validate_entry(_entry(debit_line("6300", "10.00"), credit_line("1010", "10.00")))

    def test_unbalanced_entry_is_rejected(self):
        with self.assertRaises(UnbalancedEntryError):
            validate_entry(_entry(debit_line("6100", "10.00"), credit_line("1010", "9.99")))

    def test_date_without_period_is_rejected(self):
        with self.assertRaises(ClosedPeriodError):
            validate_entry(
                _entry(
                    debit_line("6100", "10.00"),
                    credit_line("1010", "10.00"),
                    entry_date=date(2031, 1, 15),
                )
            )

    def test_closed_period_is_rejected(self):
        close_period(get_period_for_date(date(2024, 3, 10)).id)

        with self.assertRaises(ClosedPeriodError):
            validate_entry(_entry(debit_line("6100", "10.00"), credit_line("1010", "10.00")))
