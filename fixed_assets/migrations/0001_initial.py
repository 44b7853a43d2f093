"""
======================================================
PATH: fixed_assets/migrations/0001_initial.py
======================================================
MIGRATION: Fixed asset register and depreciation

Creates:
- FixedAsset
- DepreciationSchedule (1:1 with asset)
- UnitsOfProductionReading
- DepreciationRun (one per period end)
- DepreciationCharge (one per asset schedule period)
"""

from __future__ import annotations

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="FixedAsset",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("asset_number", models.CharField(max_length=50, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("acquisition_date", models.DateField()),
                (
                    "cost",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("asset_account_code", models.CharField(blank=True, default="", max_length=20)),
                ("expense_account_code", models.CharField(blank=True, default="", max_length=20)),
                ("accumulated_account_code", models.CharField(blank=True, default="", max_length=20)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("disposed", "Disposed")],
                        db_index=True,
                        default="active",
                        max_length=10,
                    ),
                ),
                ("disposed_on", models.DateField(blank=True, null=True)),
                ("disposal_proceeds", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["asset_number"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("disposed_on__isnull", True), ("status", "active")),
                            models.Q(("disposed_on__isnull", False), ("status", "disposed")),
                            _connector="OR",
                        ),
                        name="chk_fixed_asset_disposal_state",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DepreciationSchedule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "method",
                    models.CharField(
                        choices=[
                            ("straight_line", "Straight Line"),
                            ("declining_balance", "Declining Balance"),
                            ("double_declining", "Double Declining Balance"),
                            ("units_of_production", "Units of Production"),
                        ],
                        default="straight_line",
                        max_length=30,
                    ),
                ),
                ("cost_basis", models.DecimalField(decimal_places=2, max_digits=14)),
                (
                    "residual_value",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("useful_life_periods", models.PositiveIntegerField(help_text="Useful life in months")),
                ("start_date", models.DateField()),
                ("total_units", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("declining_factor", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "asset",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="schedule",
                        to="fixed_assets.fixedasset",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="UnitsOfProductionReading",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("period_number", models.PositiveIntegerField()),
                (
                    "units",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                (
                    "schedule",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="unit_readings",
                        to="fixed_assets.depreciationschedule",
                    ),
                ),
            ],
            options={
                "ordering": ["schedule", "period_number"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("schedule", "period_number"),
                        name="uniq_units_reading_per_period",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DepreciationRun",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("period_end", models.DateField(unique=True)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=16)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="depreciation_runs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-period_end"],
            },
        ),
        migrations.CreateModel(
            name="DepreciationCharge",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("period_number", models.PositiveIntegerField()),
                ("period_end", models.DateField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                (
                    "run",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="charges",
                        to="fixed_assets.depreciationrun",
                    ),
                ),
                (
                    "asset",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="depreciation_charges",
                        to="fixed_assets.fixedasset",
                    ),
                ),
            ],
            options={
                "ordering": ["asset", "period_number"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("asset", "period_number"),
                        name="uniq_depreciation_charge_per_period",
                    ),
                ],
            },
        ),
    ]
