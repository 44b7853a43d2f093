# inventory/serializers/issue.py

from rest_framework import serializers

from accounting.adapters import InventoryIssueSnapshot
from accounting.services.money import ZERO
from inventory.models import Product


class IssueItemSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    quantity = serializers.IntegerField(min_value=1)


class InventoryIssueSerializer(serializers.Serializer):
    """
    Internal consumption (samples, write-offs). Cost is always FIFO-derived
    from the items; callers never send a cost.
    """

    issue_id = serializers.CharField(max_length=100)
    issue_date = serializers.DateField()
    description = serializers.CharField(required=False, allow_blank=True, default="")
    cogs_account_code = serializers.CharField(required=False, allow_blank=True, default="")
    items = IssueItemSerializer(many=True, allow_empty=False)

    def validate_items(self, items):
        for item in items:
            if not item["product"].is_stocked:
                raise serializers.ValidationError(f"{item['product'].sku} is not a physical-stock product.")
        return items

    def to_snapshot(self) -> InventoryIssueSnapshot:
        data = self.validated_data
        return InventoryIssueSnapshot(
            issue_id=data["issue_id"],
            issue_date=data["issue_date"],
            cost=ZERO,
            description=data.get("description", ""),
            cogs_account_code=data.get("cogs_account_code", ""),
        )

    def items_for_issue(self) -> list:
        return [(item["product"], item["quantity"]) for item in self.validated_data["items"]]


class IssueReverseSerializer(serializers.Serializer):
    reversal_date = serializers.DateField(required=False, allow_null=True, default=None)
