# fixed_assets/tests/test_asset_service.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models.journal import JournalEntry
from accounting.services.balance_service import get_account_balance
from accounting.services.document_posting import (
    ASSET_ACQUISITION,
    ASSET_DISPOSAL,
    DEPRECIATION_RUN,
    find_entry_for_document,
)
from accounting.services.exceptions import PostingRuleError
from accounting.tests.utils import seed_ledger
from fixed_assets.models import DepreciationCharge, DepreciationRun, DepreciationSchedule, FixedAsset
from fixed_assets.services.asset_service import (
    asset_summary,
    dispose_asset,
    preview_schedule,
    record_units_reading,
    register_asset,
    run_depreciation,
)
from fixed_assets.services.depreciation import InvalidDepreciationParametersError


def _register_van(**overrides):
    params = {
        "asset_number": "FA-001",
        "name": "Delivery van",
        "acquisition_date": date(2024, 1, 1),
        "cost": "12000.00",
        "useful_life_periods": 60,
    }
    params.update(overrides)
    return register_asset(**params)


def _entry_lines(entry):
    return {(line.account.code, line.entry_type): line.amount for line in entry.lines.select_related("account")}


class RegisterAssetTests(TestCase):
    def setUp(self):
        seed_ledger(2024)

    def test_register_with_acquisition_entry(self):
        asset = _register_van(funding_account_code="")

        self.assertEqual(asset.schedule.method, DepreciationSchedule.Method.STRAIGHT_LINE)
        self.assertEqual(asset.schedule.start_date, date(2024, 1, 1))
        self.assertEqual(asset.schedule.cost_basis, Decimal("12000.00"))

        entry = find_entry_for_document(ASSET_ACQUISITION, asset.pk)
        self.assertEqual(
            _entry_lines(entry),
            {("1500", "DEBIT"): Decimal("12000.00"), ("1010", "CREDIT"): Decimal("12000.00")},
        )
        self.assertEqual(get_account_balance("1500"), Decimal("12000.00"))

    def test_register_without_acquisition_posts_nothing(self):
        _register_van()

        self.assertFalse(JournalEntry.objects.exists())

    def test_invalid_parameters_create_nothing(self):
        with self.assertRaises(InvalidDepreciationParametersError):
            _register_van(residual_value="12000.00")
        with self.assertRaises(InvalidDepreciationParametersError):
            _register_van(method=DepreciationSchedule.Method.UNITS_OF_PRODUCTION)

        self.assertFalse(FixedAsset.objects.exists())
        self.assertFalse(DepreciationSchedule.objects.exists())

    def test_declining_balance_uses_default_factor(self):
        asset = _register_van(
            cost="1200.00", useful_life_periods=6, method=DepreciationSchedule.Method.DECLINING_BALANCE
        )

        rows = preview_schedule(asset.schedule)

        self.assertEqual(rows[0]["amount"], Decimal("300.00"))
        self.assertEqual(rows[-1]["book_value"], Decimal("0.00"))


class DepreciationRunTests(TestCase):
    """
    GUARANTEES:
    - One run per period end, replay returns the existing run
    - A run charges every uncharged period up to its date (catch-up)
    - Each schedule period is charged at most once
    """

    def setUp(self):
        seed_ledger(2024)
        self.asset = _register_van(funding_account_code="")

    def test_run_posts_one_entry(self):
        run = run_depreciation(date(2024, 1, 31))

        self.assertEqual(run.total_amount, Decimal("200.00"))
        entry = find_entry_for_document(DEPRECIATION_RUN, run.pk)
        self.assertEqual(
            _entry_lines(entry),
            {("6500", "DEBIT"): Decimal("200.00"), ("1590", "CREDIT"): Decimal("200.00")},
        )
        self.assertEqual(entry.entry_date, date(2024, 1, 31))

    def test_replayed_run_returns_existing(self):
        first = run_depreciation(date(2024, 1, 31))
        second = run_depreciation(date(2024, 1, 31))

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(DepreciationRun.objects.count(), 1)
        self.assertEqual(DepreciationCharge.objects.count(), 1)
        self.assertEqual(get_account_balance("6500"), Decimal("200.00"))

    def test_catch_up_charges_missed_periods(self):
        run_depreciation(date(2024, 1, 31))
        run = run_depreciation(date(2024, 4, 30))

        self.assertEqual(
            sorted(run.charges.values_list("period_number", flat=True)),
            [2, 3, 4],
        )
        self.assertEqual(run.total_amount, Decimal("600.00"))
        self.assertEqual(self.asset.accumulated_depreciation, Decimal("800.00"))
        self.assertEqual(get_account_balance("6500"), Decimal("800.00"))

        summary = asset_summary(self.asset)
        self.assertEqual(summary["book_value"], Decimal("11200.00"))

        charged = [row["charged"] for row in preview_schedule(self.asset.schedule)[:5]]
        self.assertEqual(charged, [True, True, True, True, False])

    def test_run_before_any_schedule_starts_posts_nothing(self):
        run = run_depreciation(date(2023, 12, 31))

        self.assertEqual(run.total_amount, Decimal("0.00"))
        self.assertFalse(run.charges.exists())
        self.assertIsNone(find_entry_for_document(DEPRECIATION_RUN, run.pk))

    def test_charged_asset_cost_is_frozen(self):
        run_depreciation(date(2024, 1, 31))

        self.asset.cost = Decimal("15000.00")
        with self.assertRaises(ValidationError):
            self.asset.save()


class DisposalTests(TestCase):
    def setUp(self):
        seed_ledger(2024)
        self.asset = _register_van(funding_account_code="")
        run_depreciation(date(2024, 4, 30))

    def test_disposal_with_gain(self):
        entry = dispose_asset(self.asset.pk, disposal_date=date(2024, 5, 10), proceeds="11500.00")

        self.assertEqual(
            _entry_lines(entry),
            {
                ("1000", "DEBIT"): Decimal("11500.00"),
                ("1590", "DEBIT"): Decimal("800.00"),
                ("1500", "CREDIT"): Decimal("12000.00"),
                ("4900", "CREDIT"): Decimal("300.00"),
            },
        )
        self.asset.refresh_from_db()
        self.assertEqual(self.asset.status, FixedAsset.Status.DISPOSED)
        self.assertEqual(self.asset.disposed_on, date(2024, 5, 10))
        self.assertEqual(get_account_balance("1500"), Decimal("0.00"))
        self.assertEqual(get_account_balance("1590"), Decimal("0.00"))

    def test_scrapping_books_a_loss(self):
        entry = dispose_asset(self.asset.pk, disposal_date=date(2024, 5, 10))

        self.assertEqual(_entry_lines(entry)[("8920", "DEBIT")], Decimal("11200.00"))

    def test_disposed_asset_is_skipped_by_later_runs(self):
        dispose_asset(self.asset.pk, disposal_date=date(2024, 5, 10))

        run = run_depreciation(date(2024, 6, 30))

        self.assertEqual(run.total_amount, Decimal("0.00"))
        self.assertEqual(find_entry_for_document(ASSET_DISPOSAL, self.asset.pk).status, JournalEntry.Status.POSTED)

    def test_invalid_disposals(self):
        with self.assertRaises(PostingRuleError):
            dispose_asset(999999, disposal_date=date(2024, 5, 10))
        with self.assertRaises(PostingRuleError):
            dispose_asset(self.asset.pk, disposal_date=date(2023, 12, 31))

        dispose_asset(self.asset.pk, disposal_date=date(2024, 5, 10))
        with self.assertRaises(PostingRuleError):
            dispose_asset(self.asset.pk, disposal_date=date(2024, 5, 11))


class UnitsReadingTests(TestCase):
    def setUp(self):
        seed_ledger(2024)
        self.asset = _register_van(
            asset_number="FA-UOP",
            name="Press",
            cost="10000.00",
            useful_life_periods=4,
            method=DepreciationSchedule.Method.UNITS_OF_PRODUCTION,
            total_units="1000",
        )

    def test_reading_drives_the_charge(self):
        record_units_reading(self.asset.pk, period_number=1, units="100")

        run = run_depreciation(date(2024, 1, 31))

        self.assertEqual(run.total_amount, Decimal("1000.00"))

    def test_reading_is_updated_until_charged(self):
        record_units_reading(self.asset.pk, period_number=1, units="100")
        record_units_reading(self.asset.pk, period_number=1, units="250")
        run_depreciation(date(2024, 1, 31))

        self.assertEqual(self.asset.accumulated_depreciation, Decimal("2500.00"))
        with self.assertRaises(PostingRuleError):
            record_units_reading(self.asset.pk, period_number=1, units="10")

    def test_invalid_readings(self):
        with self.assertRaises(InvalidDepreciationParametersError):
            record_units_reading(self.asset.pk, period_number=5, units="10")
        with self.assertRaises(InvalidDepreciationParametersError):
            record_units_reading(self.asset.pk, period_number=2, units="-1")

        straight = _register_van(asset_number="FA-SL")
        with self.assertRaises(InvalidDepreciationParametersError):
            record_units_reading(straight.pk, period_number=1, units="10")
