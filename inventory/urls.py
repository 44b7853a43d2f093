# inventory/urls.py

"""
INVENTORY URLS

Register inventory routes under /api/inventory/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from inventory.views import (
    CostLayerViewSet,
    InventoryIssueReverseView,
    InventoryIssueView,
    InventoryValuationView,
    MovementViewSet,
    ProductViewSet,
    StockReceiptView,
)

router = DefaultRouter()

router.register(r"products", ProductViewSet, basename="products")
router.register(r"cost-layers", CostLayerViewSet, basename="cost-layers")
router.register(r"movements", MovementViewSet, basename="movements")

urlpatterns = [
    path("", include(router.urls)),
    path("receipts/", StockReceiptView.as_view(), name="stock-receipts"),
    path("issues/", InventoryIssueView.as_view(), name="inventory-issues"),
    path("issues/<str:issue_id>/reverse/", InventoryIssueReverseView.as_view(), name="inventory-issue-reverse"),
    path("valuation/", InventoryValuationView.as_view(), name="inventory-valuation"),
]
