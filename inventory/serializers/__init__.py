# inventory/serializers/__init__.py

from .cost_layer import CostLayerSerializer, MovementSerializer, StockReceiptSerializer
from .issue import InventoryIssueSerializer, IssueReverseSerializer
from .product import ProductSerializer

__all__ = [
    "CostLayerSerializer",
    "InventoryIssueSerializer",
    "IssueReverseSerializer",
    "MovementSerializer",
    "ProductSerializer",
    "StockReceiptSerializer",
]
