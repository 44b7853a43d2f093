# inventory/serializers/product.py

from rest_framework import serializers

from inventory.models import Product


class ProductSerializer(serializers.ModelSerializer):
    quantity_on_hand = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Product
        fields = (
            "id",
            "sku",
            "name",
            "inventory_category",
            "is_active",
            "quantity_on_hand",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "quantity_on_hand", "created_at", "updated_at")

    def validate(self, attrs):
        # Category decides whether cost layers exist; it cannot flip once stock moved.
        instance = self.instance
        category = attrs.get("inventory_category")
        if instance is not None and category and category != instance.inventory_category:
            if instance.cost_layers.exists():
                raise serializers.ValidationError(
                    {"inventory_category": "Cannot change category of a product with stock history."}
                )
        return attrs
