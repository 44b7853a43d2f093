"""
PATH: inventory/models/__init__.py

Inventory models export surface.
"""

from .cost_layer import InventoryCostLayer
from .movement import InventoryMovement
from .product import Product

__all__ = [
    "Product",
    "InventoryCostLayer",
    "InventoryMovement",
]
