# inventory/views/receipt.py

"""
MANUAL STOCK RECEIPT

POST /api/inventory/receipts/

Opens a cost layer outside a bill (opening stock, count surplus). The matching
ledger entry (Dr Inventory) is a manual journal entry; bill approval is the
normal purchase path and posts both sides itself.

Idempotent on receipt_id: a replay returns the existing layer with 200.
"""

import logging

from django.db import transaction
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import forbidden
from inventory.models import InventoryCostLayer
from inventory.serializers import CostLayerSerializer, StockReceiptSerializer
from inventory.services.fifo_costing import receive_stock

logger = logging.getLogger(__name__)

RECEIPT_SOURCE_TYPE = "stock_receipt"


class StockReceiptView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StockReceiptSerializer

    @extend_schema(tags=["inventory"], request=StockReceiptSerializer, responses={201: CostLayerSerializer})
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm("inventory.add_inventorycostlayer"):
            return forbidden("You do not have permission to receive stock.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        with transaction.atomic():
            existing = (
                InventoryCostLayer.objects.select_for_update()
                .filter(source_type=RECEIPT_SOURCE_TYPE, source_id=data["receipt_id"])
                .first()
            )
            if existing is not None:
                return Response(CostLayerSerializer(existing).data, status=status.HTTP_200_OK)

            try:
                layer = receive_stock(
                    product=data["product"],
                    quantity=data["quantity"],
                    unit_cost=data["unit_cost"],
                    received_date=data["received_date"],
                    source_type=RECEIPT_SOURCE_TYPE,
                    source_id=data["receipt_id"],
                )
            except ValueError as exc:
                return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        logger.info("Manual stock receipt recorded", extra={"receipt_id": data["receipt_id"], "layer_id": str(layer.id)})
        return Response(CostLayerSerializer(layer).data, status=status.HTTP_201_CREATED)
