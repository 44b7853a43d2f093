# inventory/views/cost_layer.py

"""
COST LAYER + MOVEMENT VIEWSETS (READ-ONLY)

Layers and movements are the FIFO audit trail; nothing here mutates them.

Filters:
    /api/inventory/cost-layers/?product=<uuid>&open=true
    /api/inventory/movements/?product=<uuid>&reason=issue&source_type=invoice
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from accounting.api.permissions import HasActionPermission
from inventory.models import InventoryCostLayer, InventoryMovement
from inventory.serializers import CostLayerSerializer, MovementSerializer


@extend_schema(
    tags=["inventory"],
    parameters=[
        OpenApiParameter(
            name="open",
            type=bool,
            required=False,
            description="Only non-voided layers with remaining quantity.",
        ),
    ],
)
class CostLayerViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = CostLayerSerializer
    permission_classes = [IsAuthenticated, HasActionPermission]
    filterset_fields = ("product", "source_type", "source_id", "is_voided")

    action_permissions = {
        "list": "inventory.view_inventorycostlayer",
        "retrieve": "inventory.view_inventorycostlayer",
    }

    def get_queryset(self):
        qs = InventoryCostLayer.objects.select_related("product").order_by(
            "product__name", "received_date", "created_at"
        )
        if (self.request.query_params.get("open") or "").strip().lower() in ("1", "true", "yes"):
            qs = qs.filter(is_voided=False, quantity_remaining__gt=0)
        return qs


@extend_schema(tags=["inventory"])
class MovementViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = MovementSerializer
    permission_classes = [IsAuthenticated, HasActionPermission]
    filterset_fields = ("product", "layer", "movement_type", "reason", "source_type", "source_id")

    action_permissions = {
        "list": "inventory.view_inventorymovement",
        "retrieve": "inventory.view_inventorymovement",
    }

    queryset = InventoryMovement.objects.select_related("layer").order_by("-created_at")
