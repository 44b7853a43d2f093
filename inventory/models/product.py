# inventory/models/product.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Represents an item that can appear on bills and invoices.

    STOCK MODEL (IMPORTANT):
    - Product itself does NOT store stock
    - Stock lives in InventoryCostLayer (one layer per receipt)
    - On-hand quantity = sum of open layers' quantity_remaining

    inventory_category decides the accounting route:
    - physical_stock -> received into Inventory-Asset, relieved at FIFO cost
    - non_stock / service -> expensed directly on the bill
    """

    class InventoryCategory(models.TextChoices):
        PHYSICAL_STOCK = "physical_stock", "Physical Stock"
        NON_STOCK = "non_stock", "Non-Stock Item"
        SERVICE = "service", "Service"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)

    inventory_category = models.CharField(
        max_length=20,
        choices=InventoryCategory.choices,
        default=InventoryCategory.PHYSICAL_STOCK,
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["inventory_category"], name="product_category_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    @property
    def is_stocked(self) -> bool:
        return self.inventory_category == self.InventoryCategory.PHYSICAL_STOCK

    def clean(self):
        self.sku = (self.sku or "").strip()
        self.name = (self.name or "").strip()
        if not self.sku:
            raise ValidationError({"sku": "sku is required"})
        if not self.name:
            raise ValidationError({"name": "name is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
