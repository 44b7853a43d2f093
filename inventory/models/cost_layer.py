# inventory/models/cost_layer.py

"""
INVENTORY COST LAYER (RECEIPT-BASED INVENTORY)

Represents ONE receipt of stock at a specific unit cost.

CANONICAL MODEL:
- One layer per received product line (bill approval, manual receipt)
- quantity_received and unit_cost are immutable after creation
- quantity_remaining is mutated ONLY via inventory.services.fifo_costing
- Consumed FIFO: received_date, then creation order
- Voided layers (bill void) keep their row for audit; remaining is zeroed
"""

import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from .product import Product


class InventoryCostLayer(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="cost_layers",
    )

    received_date = models.DateField()

    quantity_received = models.PositiveIntegerField(help_text="Quantity received (immutable)")
    quantity_remaining = models.PositiveIntegerField(
        default=0,
        help_text="Remaining quantity (service-managed only)",
    )

    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Unit cost for this receipt (immutable).",
    )

    source_type = models.CharField(max_length=50, blank=True, default="")
    source_id = models.CharField(max_length=100, blank=True, default="")

    is_voided = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["received_date", "created_at"]
        indexes = [
            models.Index(fields=["product", "received_date", "created_at"], name="costlayer_fifo_idx"),
            models.Index(fields=["source_type", "source_id"], name="costlayer_source_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_received__gt=0),
                name="chk_costlayer_qty_received_gt_zero",
            ),
            models.CheckConstraint(
                condition=Q(quantity_remaining__lte=F("quantity_received")),
                name="chk_costlayer_remaining_lte_received",
            ),
            models.CheckConstraint(
                condition=Q(unit_cost__gte=0),
                name="chk_costlayer_unit_cost_gte_zero",
            ),
        ]
        verbose_name = "Inventory Cost Layer"
        verbose_name_plural = "Inventory Cost Layers"

    def __str__(self):
        return f"{self.product} | {self.quantity_remaining}/{self.quantity_received} @ {self.unit_cost}"

    @property
    def quantity_consumed(self) -> int:
        return int(self.quantity_received) - int(self.quantity_remaining)

    def clean(self):
        if self.quantity_received is None or self.quantity_received <= 0:
            raise ValidationError({"quantity_received": "quantity_received must be greater than zero"})

        if self.quantity_remaining is None or self.quantity_remaining < 0:
            raise ValidationError({"quantity_remaining": "quantity_remaining cannot be negative"})

        if self.quantity_remaining > self.quantity_received:
            raise ValidationError(
                {"quantity_remaining": "quantity_remaining cannot exceed quantity_received"}
            )

        if self.unit_cost is None or self.unit_cost < 0:
            raise ValidationError({"unit_cost": "unit_cost must be >= 0"})

        if not self._state.adding:
            stored = (
                InventoryCostLayer.objects.filter(pk=self.pk)
                .values("quantity_received", "unit_cost", "product_id")
                .first()
            )
            if stored and (
                stored["quantity_received"] != self.quantity_received
                or stored["unit_cost"] != self.unit_cost
                or stored["product_id"] != self.product_id
            ):
                raise ValidationError("quantity_received, unit_cost and product are immutable")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Cost layers cannot be deleted; void them through the costing service")
