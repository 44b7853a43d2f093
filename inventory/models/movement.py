# inventory/models/movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable inventory movement, one per layer touched.

GUARANTEES:
- Append-only (no updates, no deletes)
- Movement direction validated against reason
- unit_cost_snapshot always copies the layer's unit cost, so reversals restore
  the original cost instead of a blended one
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from .cost_layer import InventoryCostLayer
from .product import Product


class InventoryMovement(models.Model):
    class MovementType(models.TextChoices):
        IN = "IN", "Stock In"
        OUT = "OUT", "Stock Out"

    class Reason(models.TextChoices):
        RECEIPT = "RECEIPT", "Stock Receipt"
        ISSUE = "ISSUE", "Issue (COGS)"
        RETURN = "RETURN", "Issue Reversal"
        VOID = "VOID", "Receipt Void"

    REASON_TO_MOVEMENT = {
        Reason.RECEIPT: MovementType.IN,
        Reason.RETURN: MovementType.IN,
        Reason.ISSUE: MovementType.OUT,
        Reason.VOID: MovementType.OUT,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="movements"
    )
    layer = models.ForeignKey(
        InventoryCostLayer, on_delete=models.PROTECT, related_name="movements"
    )

    movement_type = models.CharField(max_length=3, choices=MovementType.choices)
    reason = models.CharField(max_length=20, choices=Reason.choices)

    quantity = models.PositiveIntegerField()

    unit_cost_snapshot = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Unit cost copied from the layer at movement time (immutable).",
    )

    source_type = models.CharField(max_length=50, blank=True, default="")
    source_id = models.CharField(max_length=100, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["reason"], name="movement_reason_idx"),
            models.Index(fields=["product", "created_at"], name="movement_product_idx"),
            models.Index(fields=["layer", "created_at"], name="movement_layer_idx"),
            models.Index(fields=["source_type", "source_id", "reason"], name="movement_source_idx"),
        ]

    def clean(self):
        if self.quantity is None or self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")

        if self.layer_id and self.product_id:
            layer_product = (
                InventoryCostLayer.objects.filter(id=self.layer_id)
                .values_list("product_id", flat=True)
                .first()
            )
            if layer_product is not None and layer_product != self.product_id:
                raise ValidationError("Layer does not belong to product")

        expected_type = self.REASON_TO_MOVEMENT.get(self.reason)
        if expected_type and self.movement_type != expected_type:
            raise ValidationError(f"{self.reason} requires movement_type={expected_type}")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("InventoryMovement records are immutable")

        if self.unit_cost_snapshot is None and self.layer_id:
            self.unit_cost_snapshot = (
                InventoryCostLayer.objects.filter(id=self.layer_id)
                .values_list("unit_cost", flat=True)
                .first()
            )

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("InventoryMovement records are immutable and cannot be deleted")

    @property
    def total_cost(self) -> Decimal:
        return (self.unit_cost_snapshot or Decimal("0.00")) * Decimal(int(self.quantity or 0))

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.reason} | {self.quantity}"
