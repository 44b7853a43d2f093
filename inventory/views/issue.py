# inventory/views/issue.py

"""
INTERNAL INVENTORY ISSUES

POST /api/inventory/issues/                     FIFO issue + Dr COGS / Cr Inventory
POST /api/inventory/issues/<issue_id>/reverse/  restore layers + reversal entry

Stock and ledger move in one transaction; insufficient stock or a closed
period leaves both untouched.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import DOMAIN_ERRORS, domain_error_response, forbidden
from accounting.api.serializers import JournalEntrySerializer
from accounting.services.document_posting import (
    INVENTORY_ISSUE,
    find_entry_for_document,
    issue_inventory,
    reverse_inventory_issue,
)
from inventory.serializers import InventoryIssueSerializer, IssueReverseSerializer


class InventoryIssueView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = InventoryIssueSerializer

    @extend_schema(tags=["inventory"], request=InventoryIssueSerializer, responses={201: JournalEntrySerializer})
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm("inventory.add_inventorymovement"):
            return forbidden("You do not have permission to issue stock.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        already_posted = find_entry_for_document(INVENTORY_ISSUE, serializer.validated_data["issue_id"]) is not None

        try:
            entry = issue_inventory(
                serializer.to_snapshot(),
                items=serializer.items_for_issue(),
                created_by=request.user,
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        code = status.HTTP_200_OK if already_posted else status.HTTP_201_CREATED
        return Response(JournalEntrySerializer(entry).data, status=code)


class InventoryIssueReverseView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = IssueReverseSerializer

    @extend_schema(tags=["inventory"], request=IssueReverseSerializer, responses={201: JournalEntrySerializer})
    def post(self, request, issue_id, *args, **kwargs):
        if not request.user.has_perm("inventory.add_inventorymovement"):
            return forbidden("You do not have permission to reverse stock issues.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            reversal = reverse_inventory_issue(
                issue_id,
                serializer.validated_data.get("reversal_date"),
                created_by=request.user,
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(JournalEntrySerializer(reversal).data, status=status.HTTP_201_CREATED)
