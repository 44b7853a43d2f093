# fixed_assets/tests/test_commands.py

from __future__ import annotations

from datetime import date
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from accounting.tests.utils import seed_ledger
from fixed_assets.models import DepreciationRun
from fixed_assets.services.asset_service import register_asset


class RunDepreciationCommandTests(TestCase):
    def setUp(self):
        seed_ledger(2024)
        register_asset(
            asset_number="FA-7",
            name="Server rack",
            acquisition_date=date(2024, 1, 1),
            cost="2400.00",
            useful_life_periods=24,
        )

    def test_run_reports_charges(self):
        out = StringIO()
        call_command("run_depreciation", "--period-end", "2024-03-31", stdout=out)

        self.assertIn("3 charge(s), total 300.00", out.getvalue())
        self.assertEqual(DepreciationRun.objects.count(), 1)

    def test_bad_date(self):
        with self.assertRaises(CommandError):
            call_command("run_depreciation", "--period-end", "31/03/2024", stdout=StringIO())
