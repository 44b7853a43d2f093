# inventory/apps.py

"""
INVENTORY APP CONFIG

Receipt-based inventory:
- Products (physical stock / non-stock / service)
- FIFO cost layers + immutable movement ledger
- Costing service feeding COGS to accounting
"""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "inventory"
    verbose_name = "Inventory (FIFO Costing)"
