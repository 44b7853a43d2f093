# inventory/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Product master data for costing (sku, name, inventory category)
- quantity_on_hand annotated from open cost layers (no N+1)

Products are never deleted; set is_active=false instead.
"""

from django.db.models import Q, Sum, Value
from django.db.models.functions import Coalesce
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from accounting.api.permissions import HasActionPermission
from inventory.models import Product
from inventory.serializers import ProductSerializer


@extend_schema(
    tags=["inventory"],
    parameters=[
        OpenApiParameter(name="q", type=str, required=False, description="Search sku or name."),
    ],
)
class ProductViewSet(viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, HasActionPermission]
    filterset_fields = ("inventory_category", "is_active")
    http_method_names = ["get", "post", "patch", "head", "options"]

    action_permissions = {
        "list": "inventory.view_product",
        "retrieve": "inventory.view_product",
        "create": "inventory.add_product",
        "partial_update": "inventory.change_product",
    }

    def get_queryset(self):
        qs = Product.objects.annotate(
            quantity_on_hand=Coalesce(
                Sum("cost_layers__quantity_remaining", filter=Q(cost_layers__is_voided=False)),
                Value(0),
            )
        ).order_by("name", "sku")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(sku__icontains=q) | Q(name__icontains=q))
        return qs
