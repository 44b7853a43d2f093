# accounting/api/serializers/fiscal_periods.py

"""
======================================================
PATH: accounting/api/serializers/fiscal_periods.py
======================================================
FISCAL PERIOD SERIALIZERS

Rules:
- start_date must be <= end_date
- name is optional (single-month periods are auto-named YYYY-MM)
- retained_earnings_account_code is optional; blank -> None
"""

from rest_framework import serializers

from accounting.models.fiscal_period import FiscalPeriod


class FiscalPeriodSerializer(serializers.ModelSerializer):
    class Meta:
        model = FiscalPeriod
        fields = ("id", "name", "start_date", "end_date", "status", "closed_at", "created_at")
        read_only_fields = fields


class FiscalPeriodCreateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=64)
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError({"end_date": "end_date must be >= start_date"})
        return attrs


class FiscalYearCreateSerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=1900, max_value=9999)


class ClosePeriodSerializer(serializers.Serializer):
    post_closing_entry = serializers.BooleanField(required=False, default=False)
    retained_earnings_account_code = serializers.CharField(
        required=False, allow_blank=True, allow_null=True
    )

    def validate(self, attrs):
        code = attrs.get("retained_earnings_account_code")
        if code is not None and str(code).strip() == "":
            attrs["retained_earnings_account_code"] = None
        return attrs
