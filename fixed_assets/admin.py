# fixed_assets/admin.py

from django.contrib import admin

from fixed_assets.models import (
    DepreciationCharge,
    DepreciationRun,
    DepreciationSchedule,
    FixedAsset,
    UnitsOfProductionReading,
)


class DepreciationScheduleInline(admin.StackedInline):
    model = DepreciationSchedule
    extra = 0
    can_delete = False


@admin.register(FixedAsset)
class FixedAssetAdmin(admin.ModelAdmin):
    list_display = ("asset_number", "name", "acquisition_date", "cost", "status", "disposed_on")
    list_filter = ("status",)
    search_fields = ("asset_number", "name")
    ordering = ("asset_number",)
    # Disposal goes through asset_service (posts the disposal entry).
    readonly_fields = ("status", "disposed_on", "disposal_proceeds", "created_at", "updated_at")
    inlines = (DepreciationScheduleInline,)

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(UnitsOfProductionReading)
class UnitsOfProductionReadingAdmin(admin.ModelAdmin):
    list_display = ("schedule", "period_number", "units")
    ordering = ("schedule", "period_number")


class DepreciationChargeInline(admin.TabularInline):
    model = DepreciationCharge
    extra = 0
    fields = ("asset", "period_number", "period_end", "amount")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(DepreciationRun)
class DepreciationRunAdmin(admin.ModelAdmin):
    list_display = ("period_end", "total_amount", "created_by", "created_at")
    ordering = ("-period_end",)
    readonly_fields = ("period_end", "total_amount", "created_by", "created_at")
    inlines = (DepreciationChargeInline,)

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
