# inventory/admin.py

from django.contrib import admin

from inventory.models import InventoryCostLayer, InventoryMovement, Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "inventory_category", "is_active", "created_at")
    list_filter = ("inventory_category", "is_active")
    search_fields = ("sku", "name")
    ordering = ("name",)
    readonly_fields = ("created_at", "updated_at")


@admin.register(InventoryCostLayer)
class InventoryCostLayerAdmin(admin.ModelAdmin):
    list_display = (
        "product",
        "received_date",
        "quantity_received",
        "quantity_remaining",
        "unit_cost",
        "source_type",
        "source_id",
        "is_voided",
    )
    list_filter = ("is_voided", "source_type")
    search_fields = ("product__sku", "product__name", "source_id")
    ordering = ("product", "received_date", "created_at")
    readonly_fields = [f.name for f in InventoryCostLayer._meta.fields]

    # Quantities move only through FIFO costing.
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(InventoryMovement)
class InventoryMovementAdmin(admin.ModelAdmin):
    list_display = (
        "created_at",
        "product",
        "movement_type",
        "reason",
        "quantity",
        "unit_cost_snapshot",
        "source_type",
        "source_id",
    )
    list_filter = ("movement_type", "reason", "source_type")
    search_fields = ("product__sku", "source_id")
    ordering = ("-created_at",)
    readonly_fields = [f.name for f in InventoryMovement._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
