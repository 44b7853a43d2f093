# fixed_assets/models/asset.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Sum


class FixedAsset(models.Model):
    """
    A depreciable long-lived asset.

    Account codes are optional; blank codes resolve through the chart
    registry roles (FIXED_ASSETS, DEPRECIATION_EXPENSE, ACCUMULATED_DEPRECIATION).
    """

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        DISPOSED = "disposed", "Disposed"

    asset_number = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    acquisition_date = models.DateField()

    cost = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    asset_account_code = models.CharField(max_length=20, blank=True, default="")
    expense_account_code = models.CharField(max_length=20, blank=True, default="")
    accumulated_account_code = models.CharField(max_length=20, blank=True, default="")

    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE, db_index=True)
    disposed_on = models.DateField(null=True, blank=True)
    disposal_proceeds = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["asset_number"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(status="active", disposed_on__isnull=True)
                | models.Q(status="disposed", disposed_on__isnull=False),
                name="chk_fixed_asset_disposal_state",
            ),
        ]

    def __str__(self):
        return f"{self.asset_number} - {self.name}"

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE

    @property
    def accumulated_depreciation(self) -> Decimal:
        total = self.depreciation_charges.aggregate(total=Sum("amount")).get("total")
        return total or Decimal("0.00")

    @property
    def book_value(self) -> Decimal:
        return self.cost - self.accumulated_depreciation

    def clean(self):
        self.asset_number = (self.asset_number or "").strip()
        self.name = (self.name or "").strip()
        if not self.asset_number:
            raise ValidationError({"asset_number": "asset_number is required"})
        if not self.name:
            raise ValidationError({"name": "name is required"})

        if not self._state.adding and self.depreciation_charges.exists():
            stored = FixedAsset.objects.filter(pk=self.pk).values("cost", "acquisition_date").first()
            if stored and (stored["cost"] != self.cost or stored["acquisition_date"] != self.acquisition_date):
                raise ValidationError("cost and acquisition_date are frozen once depreciation has been charged")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
