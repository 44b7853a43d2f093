"""
======================================================
PATH: inventory/migrations/0001_initial.py
======================================================
MIGRATION: Receipt-based inventory

Creates:
- Product
- InventoryCostLayer (one per receipt, consumed FIFO)
- InventoryMovement (append-only stock ledger)
"""

from __future__ import annotations

import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sku", models.CharField(db_index=True, max_length=128, unique=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                (
                    "inventory_category",
                    models.CharField(
                        choices=[
                            ("physical_stock", "Physical Stock"),
                            ("non_stock", "Non-Stock Item"),
                            ("service", "Service"),
                        ],
                        default="physical_stock",
                        max_length=20,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["inventory_category"], name="product_category_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="InventoryCostLayer",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("received_date", models.DateField()),
                ("quantity_received", models.PositiveIntegerField(help_text="Quantity received (immutable)")),
                (
                    "quantity_remaining",
                    models.PositiveIntegerField(default=0, help_text="Remaining quantity (service-managed only)"),
                ),
                (
                    "unit_cost",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Unit cost for this receipt (immutable).",
                        max_digits=12,
                    ),
                ),
                ("source_type", models.CharField(blank=True, default="", max_length=50)),
                ("source_id", models.CharField(blank=True, default="", max_length=100)),
                ("is_voided", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="cost_layers",
                        to="inventory.product",
                    ),
                ),
            ],
            options={
                "verbose_name": "Inventory Cost Layer",
                "verbose_name_plural": "Inventory Cost Layers",
                "ordering": ["received_date", "created_at"],
                "indexes": [
                    models.Index(fields=["product", "received_date", "created_at"], name="costlayer_fifo_idx"),
                    models.Index(fields=["source_type", "source_id"], name="costlayer_source_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity_received__gt=0),
                        name="chk_costlayer_qty_received_gt_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(quantity_remaining__lte=models.F("quantity_received")),
                        name="chk_costlayer_remaining_lte_received",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(unit_cost__gte=0),
                        name="chk_costlayer_unit_cost_gte_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="InventoryMovement",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "movement_type",
                    models.CharField(choices=[("IN", "Stock In"), ("OUT", "Stock Out")], max_length=3),
                ),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("RECEIPT", "Stock Receipt"),
                            ("ISSUE", "Issue (COGS)"),
                            ("RETURN", "Issue Reversal"),
                            ("VOID", "Receipt Void"),
                        ],
                        max_length=20,
                    ),
                ),
                ("quantity", models.PositiveIntegerField()),
                (
                    "unit_cost_snapshot",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Unit cost copied from the layer at movement time (immutable).",
                        max_digits=12,
                    ),
                ),
                ("source_type", models.CharField(blank=True, default="", max_length=50)),
                ("source_id", models.CharField(blank=True, default="", max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="movements",
                        to="inventory.product",
                    ),
                ),
                (
                    "layer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="movements",
                        to="inventory.inventorycostlayer",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["reason"], name="movement_reason_idx"),
                    models.Index(fields=["product", "created_at"], name="movement_product_idx"),
                    models.Index(fields=["layer", "created_at"], name="movement_layer_idx"),
                    models.Index(fields=["source_type", "source_id", "reason"], name="movement_source_idx"),
                ],
            },
        ),
    ]
