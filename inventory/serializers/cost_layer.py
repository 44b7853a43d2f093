# inventory/serializers/cost_layer.py

"""
======================================================
PATH: inventory/serializers/cost_layer.py
======================================================
COST LAYER / MOVEMENT SERIALIZERS

Layers and movements are read-only at the API boundary; quantities only
change through the FIFO costing service.

StockReceiptSerializer validates a manual receipt (opening stock, stock
found on count). Purchases arrive through bill approval instead.
"""

from decimal import Decimal

from rest_framework import serializers

from inventory.models import InventoryCostLayer, InventoryMovement, Product


class CostLayerSerializer(serializers.ModelSerializer):
    product_sku = serializers.CharField(source="product.sku", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = InventoryCostLayer
        fields = (
            "id",
            "product",
            "product_sku",
            "product_name",
            "received_date",
            "quantity_received",
            "quantity_remaining",
            "unit_cost",
            "source_type",
            "source_id",
            "is_voided",
            "created_at",
        )
        read_only_fields = fields


class MovementSerializer(serializers.ModelSerializer):
    total_cost = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)

    class Meta:
        model = InventoryMovement
        fields = (
            "id",
            "product",
            "layer",
            "movement_type",
            "reason",
            "quantity",
            "unit_cost_snapshot",
            "total_cost",
            "source_type",
            "source_id",
            "created_at",
        )
        read_only_fields = fields


class StockReceiptSerializer(serializers.Serializer):
    receipt_id = serializers.CharField(max_length=100)
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.filter(is_active=True))
    quantity = serializers.IntegerField(min_value=1)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))
    received_date = serializers.DateField()

    def validate_product(self, product):
        if not product.is_stocked:
            raise serializers.ValidationError("Only physical-stock products carry cost layers.")
        return product
