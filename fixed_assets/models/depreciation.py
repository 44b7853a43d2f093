# fixed_assets/models/depreciation.py

"""
DEPRECIATION STORAGE

- DepreciationSchedule: method + parameters for one asset (validated with the
  same rules as the calculator)
- UnitsOfProductionReading: units consumed per schedule period
- DepreciationRun: one per period end; posts ONE journal entry keyed by run id
- DepreciationCharge: one row per (asset, schedule period) ever charged, so a
  catch-up run never charges a period twice
"""

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from fixed_assets.services.depreciation import (
    DepreciationScheduleCalculator,
    InvalidDepreciationParametersError,
)

from .asset import FixedAsset


class DepreciationSchedule(models.Model):
    class Method(models.TextChoices):
        STRAIGHT_LINE = "straight_line", "Straight Line"
        DECLINING_BALANCE = "declining_balance", "Declining Balance"
        DOUBLE_DECLINING = "double_declining", "Double Declining Balance"
        UNITS_OF_PRODUCTION = "units_of_production", "Units of Production"

    asset = models.OneToOneField(FixedAsset, on_delete=models.CASCADE, related_name="schedule")

    method = models.CharField(max_length=30, choices=Method.choices, default=Method.STRAIGHT_LINE)

    cost_basis = models.DecimalField(max_digits=14, decimal_places=2)
    residual_value = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    useful_life_periods = models.PositiveIntegerField(help_text="Useful life in months")
    start_date = models.DateField()

    total_units = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    declining_factor = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.asset} | {self.get_method_display()} | {self.useful_life_periods} months"

    def resolved_declining_factor(self):
        if self.declining_factor is not None:
            return self.declining_factor
        if self.method == self.Method.DECLINING_BALANCE:
            return getattr(settings, "ACCOUNTING_DEFAULT_DECLINING_FACTOR", None)
        return None

    def units_by_period(self) -> dict:
        if self.pk is None:
            return {}
        return dict(self.unit_readings.values_list("period_number", "units"))

    def calculator(self) -> DepreciationScheduleCalculator:
        return DepreciationScheduleCalculator(
            cost_basis=self.cost_basis,
            residual_value=self.residual_value,
            useful_life_periods=self.useful_life_periods,
            start_date=self.start_date,
            method=self.method,
            units=self.units_by_period(),
            total_units=self.total_units,
            declining_factor=self.resolved_declining_factor(),
        )

    def clean(self):
        if self.useful_life_periods is None or self.cost_basis is None or self.start_date is None:
            return
        try:
            self.calculator()
        except InvalidDepreciationParametersError as exc:
            raise ValidationError(str(exc)) from exc

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class UnitsOfProductionReading(models.Model):
    schedule = models.ForeignKey(DepreciationSchedule, on_delete=models.CASCADE, related_name="unit_readings")
    period_number = models.PositiveIntegerField()
    units = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(Decimal("0"))])

    class Meta:
        ordering = ["schedule", "period_number"]
        constraints = [
            models.UniqueConstraint(fields=["schedule", "period_number"], name="uniq_units_reading_per_period"),
        ]

    def __str__(self):
        return f"{self.schedule.asset} | period {self.period_number}: {self.units}"


class DepreciationRun(models.Model):
    period_end = models.DateField(unique=True)
    total_amount = models.DecimalField(max_digits=16, decimal_places=2, default=Decimal("0.00"))

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="depreciation_runs",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-period_end"]

    def __str__(self):
        return f"Depreciation run {self.period_end:%Y-%m} ({self.total_amount})"


class DepreciationCharge(models.Model):
    run = models.ForeignKey(DepreciationRun, on_delete=models.PROTECT, related_name="charges")
    asset = models.ForeignKey(FixedAsset, on_delete=models.PROTECT, related_name="depreciation_charges")
    period_number = models.PositiveIntegerField()
    period_end = models.DateField()
    amount = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        ordering = ["asset", "period_number"]
        constraints = [
            models.UniqueConstraint(fields=["asset", "period_number"], name="uniq_depreciation_charge_per_period"),
        ]

    def __str__(self):
        return f"{self.asset} | #{self.period_number} {self.period_end} | {self.amount}"
