# inventory/views/valuation.py

"""
INVENTORY VALUATION (READ-ONLY)

GET /api/inventory/valuation/?product=<uuid>

sum(remaining quantity x unit cost) over open, non-voided layers. Equals the
Inventory control account when every receipt and issue went through the
posting services.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import forbidden, not_found
from accounting.services.money import ZERO, money
from inventory.models import Product
from inventory.services.fifo_costing import get_inventory_valuation


class InventoryValuationView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["inventory"],
        parameters=[OpenApiParameter(name="product", type=str, required=False, description="Product UUID.")],
        responses={200: dict},
    )
    def get(self, request):
        if not request.user.has_perm("inventory.view_inventorycostlayer"):
            return forbidden("You do not have permission to view inventory valuation.")

        product = None
        product_id = (request.query_params.get("product") or "").strip()
        if product_id:
            try:
                product = Product.objects.filter(pk=product_id).first()
            except DjangoValidationError:
                product = None
            if product is None:
                return not_found("Product not found.")

        rows = get_inventory_valuation(product)
        total = money(sum((row.value for row in rows), ZERO))

        return Response(
            {
                "products": [
                    {
                        "product_id": str(row.product_id),
                        "sku": row.sku,
                        "name": row.name,
                        "quantity_on_hand": row.quantity_on_hand,
                        "value": float(row.value),
                        "value_str": str(row.value),
                    }
                    for row in rows
                ],
                "total_value": float(total),
                "total_value_str": str(total),
            },
            status=status.HTTP_200_OK,
        )
