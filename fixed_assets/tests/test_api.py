# fixed_assets/tests/test_api.py

from __future__ import annotations

from datetime import date

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from accounting.tests.utils import seed_ledger, user_with_perms
from fixed_assets.models import FixedAsset
from fixed_assets.services.asset_service import register_asset

ASSET_PERMS = (
    "fixed_assets.view_fixedasset",
    "fixed_assets.add_fixedasset",
    "fixed_assets.change_fixedasset",
    "fixed_assets.view_depreciationrun",
    "fixed_assets.add_depreciationrun",
)


def _register_payload(**overrides):
    payload = {
        "asset_number": "FA-100",
        "name": "Forklift",
        "acquisition_date": "2024-01-01",
        "cost": "6000.00",
        "useful_life_periods": 60,
    }
    payload.update(overrides)
    return payload


class FixedAssetApiTests(TestCase):
    """
    GUARANTEES:
    - Register, schedule preview, readings and disposal are exposed per asset
    - Depreciation runs replay with 200 and post once
    - Action permissions gate every endpoint
    """

    def setUp(self):
        seed_ledger(2024)
        self.client = APIClient()
        self.client.force_authenticate(user=user_with_perms("assets", *ASSET_PERMS))

    def test_register_with_acquisition(self):
        res = self.client.post(
            reverse("fixed-assets-list"), _register_payload(post_acquisition=True), format="json"
        )

        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["status"], "active")
        self.assertEqual(res.data["book_value"], "6000.00")
        self.assertEqual(res.data["schedule"]["method"], "straight_line")

    def test_register_rejects_bad_parameters(self):
        res = self.client.post(
            reverse("fixed-assets-list"), _register_payload(residual_value="6000.00"), format="json"
        )

        self.assertEqual(res.status_code, 400)
        self.assertFalse(FixedAsset.objects.exists())

    def test_duplicate_asset_number(self):
        register_asset(
            asset_number="FA-100",
            name="Old forklift",
            acquisition_date=date(2024, 1, 1),
            cost="100.00",
            useful_life_periods=12,
        )

        res = self.client.post(reverse("fixed-assets-list"), _register_payload(), format="json")

        self.assertEqual(res.status_code, 400)
        self.assertIn("asset_number", res.data)

    def test_schedule_preview(self):
        asset_id = self.client.post(reverse("fixed-assets-list"), _register_payload(), format="json").data["id"]

        res = self.client.get(reverse("fixed-assets-schedule", args=[asset_id]))

        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data["periods"]), 60)
        self.assertEqual(res.data["periods"][0]["amount"], "100.00")
        self.assertEqual(res.data["periods"][0]["period_end"], "2024-01-31")
        self.assertFalse(res.data["periods"][0]["charged"])

    def test_depreciation_run_replay(self):
        self.client.post(reverse("fixed-assets-list"), _register_payload(), format="json")

        first = self.client.post(reverse("depreciation-runs-list"), {"period_end": "2024-02-29"}, format="json")
        self.assertEqual(first.status_code, 201, first.data)
        self.assertEqual(first.data["total_amount"], "200.00")
        self.assertEqual(len(first.data["charges"]), 2)
        self.assertIsNotNone(first.data["entry_id"])

        replay = self.client.post(reverse("depreciation-runs-list"), {"period_end": "2024-02-29"}, format="json")
        self.assertEqual(replay.status_code, 200)
        self.assertEqual(replay.data["id"], first.data["id"])
        self.assertEqual(replay.data["entry_id"], first.data["entry_id"])

    def test_units_reading(self):
        asset_id = self.client.post(
            reverse("fixed-assets-list"),
            _register_payload(method="units_of_production", useful_life_periods=12, total_units="5000"),
            format="json",
        ).data["id"]

        res = self.client.post(
            reverse("fixed-assets-unit-readings", args=[asset_id]),
            {"period_number": 1, "units": "250"},
            format="json",
        )
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["units"], "250.00")

        res = self.client.post(
            reverse("fixed-assets-unit-readings", args=[asset_id]),
            {"period_number": 13, "units": "1"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)

    def test_dispose(self):
        asset_id = self.client.post(
            reverse("fixed-assets-list"), _register_payload(post_acquisition=True), format="json"
        ).data["id"]

        res = self.client.post(
            reverse("fixed-assets-dispose", args=[asset_id]),
            {"disposal_date": "2024-03-01", "proceeds": "6500.00"},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["status"], "posted")

        res = self.client.post(
            reverse("fixed-assets-dispose", args=[asset_id]),
            {"disposal_date": "2024-03-02"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)

    def test_status_filter(self):
        self.client.post(reverse("fixed-assets-list"), _register_payload(), format="json")

        res = self.client.get(reverse("fixed-assets-list"), {"status": "disposed"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 0)

    def test_view_only_user_cannot_register_or_run(self):
        client = APIClient()
        client.force_authenticate(user=user_with_perms("viewer", "fixed_assets.view_fixedasset"))

        self.assertEqual(client.get(reverse("fixed-assets-list")).status_code, 200)
        self.assertEqual(
            client.post(reverse("fixed-assets-list"), _register_payload(), format="json").status_code, 403
        )
        self.assertEqual(
            client.post(reverse("depreciation-runs-list"), {"period_end": "2024-01-31"}, format="json").status_code,
            403,
        )
