# fixed_assets/serializers/asset.py

"""
======================================================
PATH: fixed_assets/serializers/asset.py
======================================================
FIXED ASSET SERIALIZERS

Read side: asset + schedule + running totals.
Write side: registration (asset + schedule in one request), disposal,
units-of-production readings.

Parameter rules (life, residual, factor, total units) are enforced by the
depreciation calculator; its errors surface as 400 responses.
"""

from decimal import Decimal

from rest_framework import serializers

from fixed_assets.models import DepreciationSchedule, FixedAsset


class DepreciationScheduleSerializer(serializers.ModelSerializer):
    class Meta:
        model = DepreciationSchedule
        fields = (
            "method",
            "cost_basis",
            "residual_value",
            "useful_life_periods",
            "start_date",
            "total_units",
            "declining_factor",
        )
        read_only_fields = fields


class FixedAssetSerializer(serializers.ModelSerializer):
    schedule = DepreciationScheduleSerializer(read_only=True)
    accumulated_depreciation = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    book_value = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = FixedAsset
        fields = (
            "id",
            "asset_number",
            "name",
            "acquisition_date",
            "cost",
            "asset_account_code",
            "expense_account_code",
            "accumulated_account_code",
            "status",
            "disposed_on",
            "disposal_proceeds",
            "accumulated_depreciation",
            "book_value",
            "schedule",
            "created_at",
        )
        read_only_fields = fields


class AssetRegisterSerializer(serializers.Serializer):
    asset_number = serializers.CharField(max_length=50)
    name = serializers.CharField(max_length=255)
    acquisition_date = serializers.DateField()
    cost = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))

    method = serializers.ChoiceField(
        choices=DepreciationSchedule.Method.choices,
        default=DepreciationSchedule.Method.STRAIGHT_LINE,
    )
    useful_life_periods = serializers.IntegerField(min_value=1)
    residual_value = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0"), required=False, default=Decimal("0.00")
    )
    start_date = serializers.DateField(required=False, allow_null=True, default=None)
    total_units = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    declining_factor = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True)

    asset_account_code = serializers.CharField(required=False, allow_blank=True, default="")
    expense_account_code = serializers.CharField(required=False, allow_blank=True, default="")
    accumulated_account_code = serializers.CharField(required=False, allow_blank=True, default="")

    post_acquisition = serializers.BooleanField(required=False, default=False)
    funding_account_code = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_asset_number(self, value):
        if FixedAsset.objects.filter(asset_number=value.strip()).exists():
            raise serializers.ValidationError("An asset with this number already exists.")
        return value

    def register_kwargs(self) -> dict:
        data = dict(self.validated_data)
        post_acquisition = data.pop("post_acquisition", False)
        funding = data.pop("funding_account_code", "")
        data["funding_account_code"] = funding if post_acquisition else None
        return data


class AssetDisposalSerializer(serializers.Serializer):
    disposal_date = serializers.DateField()
    proceeds = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0"), required=False, default=Decimal("0.00")
    )
    proceeds_account_code = serializers.CharField(required=False, allow_blank=True, default="")


class UnitsReadingSerializer(serializers.Serializer):
    period_number = serializers.IntegerField(min_value=1)
    units = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0"))
