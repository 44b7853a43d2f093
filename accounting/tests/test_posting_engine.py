# accounting/tests/test_posting_engine.py

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models.account_balance import AccountBalance
from accounting.models.journal import JournalEntry
from accounting.models.journal_line import JournalLine
from accounting.services import posting_engine
from accounting.services.balance_service import get_account_balance
from accounting.services.entry_validator import CandidateEntry, credit_line, debit_line, validate_entry
from accounting.services.exceptions import (
    EntryNotFoundError,
    JournalEntryCreationError,
    NotPostedError,
    UnbalancedEntryError,
)
from accounting.services.posting_engine import (
    IdempotencyKey,
    create_draft_entry,
    delete_draft_entry,
    post_draft_entry,
    post_entry,
    post_or_get_entry,
    update_draft_entry,
)
from accounting.tests.utils import post_simple, seed_ledger


def _rent(amount="1200.00", entry_date=date(2024, 2, 1)):
    return CandidateEntry(
        entry_date=entry_date,
        description="February rent",
        lines=(debit_line("6100", amount), credit_line("1010", amount)),
    )


class PostEntryTests(TestCase):
    """
    GUARANTEES:
    - A posted entry persists its lines in order and updates the balance cache
    - Same idempotency key never posts twice
    - Posted entries and their lines are write-once
    """

    def setUp(self):
        seed_ledger(2024)

    def test_post_persists_lines_and_balances(self):
        entry = post_entry(validate_entry(_rent()))

        self.assertEqual(entry.status, JournalEntry.Status.POSTED)
        self.assertIsNotNone(entry.posted_at)
        self.assertEqual(entry.period.name, "2024-02")

        lines = list(entry.lines.order_by("line_no"))
        self.assertEqual([line.line_no for line in lines], [1, 2])
        self.assertEqual(lines[0].account.code, "6100")
        self.assertEqual(lines[0].debit, Decimal("1200.00"))
        self.assertEqual(lines[1].credit, Decimal("1200.00"))

        rent_cache = AccountBalance.objects.get(account__code="6100")
        self.assertEqual(rent_cache.debit_total, Decimal("1200.00"))
        self.assertEqual(rent_cache.credit_total, Decimal("0.00"))
        self.assertEqual(get_account_balance("1010"), Decimal("-1200.00"))

    def test_same_key_returns_first_entry_without_new_delta(self):
        key = IdempotencyKey("expense", "EXP-7")

        first, created_first = post_or_get_entry(validate_entry(_rent()), key)
        second, created_second = post_or_get_entry(validate_entry(_rent()), key)

        self.assertTrue(created_first)
        self.assertFalse(created_second)
        self.assertEqual(first.id, second.id)
        self.assertEqual(JournalEntry.objects.filter(source_type="expense").count(), 1)
        self.assertEqual(
            AccountBalance.objects.get(account__code="6100").debit_total,
            Decimal("1200.00"),
        )

    def test_lost_insert_race_returns_winner(self):
        key = IdempotencyKey("expense", "EXP-RACE")
        winner = post_entry(validate_entry(_rent()), key)

        real_find = posting_engine.find_entry_by_key
        calls = {"n": 0}

        def find_misses_once(k):
            calls["n"] += 1
            if calls["n"] == 1:
                return None
            return real_find(k)

        with mock.patch.object(posting_engine, "find_entry_by_key", side_effect=find_misses_once):
            entry, created = post_or_get_entry(validate_entry(_rent()), key)

        self.assertFalse(created)
        self.assertEqual(entry.id, winner.id)
        self.assertEqual(JournalEntry.objects.count(), 1)
        self.assertEqual(
            AccountBalance.objects.get(account__code="6100").debit_total,
            Decimal("1200.00"),
        )

    def test_key_requires_both_parts(self):
        with self.assertRaises(JournalEntryCreationError):
            IdempotencyKey("invoice", " ")

    def test_unvalidated_entry_is_refused(self):
        with self.assertRaises(JournalEntryCreationError):
            post_entry(_rent())

    def test_posted_entry_cannot_be_edited_or_deleted(self):
        entry = post_simple(date(2024, 2, 3), "6200", "1000", "45.00")

        entry.description = "Edited"
        with self.assertRaises(ValidationError):
            entry.save()

        with self.assertRaises(ValidationError):
            entry.delete()

        line = entry.lines.first()
        line.amount = Decimal("1.00")
        with self.assertRaises(ValidationError):
            line.save()
        with self.assertRaises(ValidationError):
            line.delete()


class DraftEntryTests(TestCase):
    """
    GUARANTEES:
    - Drafts are editable, deletable and never affect balances
    - Posting a draft validates it and applies balances exactly once
    """

    def setUp(self):
        seed_ledger(2024)

    def test_draft_does_not_touch_balances(self):
        entry = create_draft_entry(_rent())

        self.assertEqual(entry.status, JournalEntry.Status.DRAFT)
        self.assertEqual(entry.lines.count(), 2)
        self.assertFalse(AccountBalance.objects.exists())
        self.assertEqual(get_account_balance("6100"), Decimal("0.00"))

    def test_unbalanced_draft_is_saved_but_cannot_post(self):
        candidate = CandidateEntry(
            entry_date=date(2024, 2, 1),
            description="Work in progress",
            lines=(debit_line("6100", "100.00"), credit_line("1010", "90.00")),
        )
        entry = create_draft_entry(candidate)

        with self.assertRaises(UnbalancedEntryError):
            post_draft_entry(entry.id)

        entry.refresh_from_db()
        self.assertEqual(entry.status, JournalEntry.Status.DRAFT)

    def test_update_then_post(self):
        entry = create_draft_entry(_rent("100.00"))
        update_draft_entry(entry.id, _rent("250.00"))

        posted = post_draft_entry(entry.id)

        self.assertEqual(posted.status, JournalEntry.Status.POSTED)
        self.assertEqual(JournalLine.objects.filter(entry=posted).count(), 2)
        self.assertEqual(get_account_balance("6100"), Decimal("250.00"))

    def test_posted_entry_is_not_a_draft(self):
        entry = create_draft_entry(_rent())
        post_draft_entry(entry.id)

        with self.assertRaises(NotPostedError):
            post_draft_entry(entry.id)
        with self.assertRaises(NotPostedError):
            update_draft_entry(entry.id, _rent("1.00"))
        with self.assertRaises(NotPostedError):
            delete_draft_entry(entry.id)

    def test_delete_draft(self):
        entry = create_draft_entry(_rent())

        delete_draft_entry(entry.id)

        self.assertFalse(JournalEntry.objects.filter(pk=entry.id).exists())
        self.assertFalse(JournalLine.objects.exists())

    def test_missing_draft(self):
        with self.assertRaises(EntryNotFoundError):
            delete_draft_entry(999999)
