# fixed_assets/serializers/run.py

from rest_framework import serializers

from fixed_assets.models import DepreciationCharge, DepreciationRun


class DepreciationChargeSerializer(serializers.ModelSerializer):
    asset_number = serializers.CharField(source="asset.asset_number", read_only=True)

    class Meta:
        model = DepreciationCharge
        fields = ("id", "asset", "asset_number", "period_number", "period_end", "amount")
        read_only_fields = fields


class DepreciationRunSerializer(serializers.ModelSerializer):
    charges = DepreciationChargeSerializer(many=True, read_only=True)
    entry_id = serializers.SerializerMethodField()

    class Meta:
        model = DepreciationRun
        fields = ("id", "period_end", "total_amount", "entry_id", "created_by", "created_at", "charges")
        read_only_fields = fields

    def get_entry_id(self, obj):
        from accounting.services.document_posting import DEPRECIATION_RUN, find_entry_for_document

        entry = find_entry_for_document(DEPRECIATION_RUN, obj.pk)
        return entry.id if entry else None


class DepreciationRunCreateSerializer(serializers.Serializer):
    period_end = serializers.DateField()
