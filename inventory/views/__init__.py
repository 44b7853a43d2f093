# inventory/views/__init__.py

"""
Inventory views package exports (router + urls imports).
"""

from .cost_layer import CostLayerViewSet, MovementViewSet
from .issue import InventoryIssueView, InventoryIssueReverseView
from .product import ProductViewSet
from .receipt import StockReceiptView
from .valuation import InventoryValuationView

__all__ = [
    "CostLayerViewSet",
    "InventoryIssueReverseView",
    "InventoryIssueView",
    "InventoryValuationView",
    "MovementViewSet",
    "ProductViewSet",
    "StockReceiptView",
]
