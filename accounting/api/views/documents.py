# accounting/api/views/documents.py

"""
PATH: accounting/api/views/documents.py

SOURCE DOCUMENT POSTING API

POST /api/accounting/invoices/issue/
POST /api/accounting/invoices/<invoice_id>/void/
POST /api/accounting/invoices/payments/
POST /api/accounting/bills/approve/
POST /api/accounting/bills/<bill_id>/void/
POST /api/accounting/bills/payments/
POST /api/accounting/expenses/

Every endpoint is idempotent on the document id: replaying a request returns
the entry posted the first time (200 instead of 201).

Permissions:
- posting a document requires accounting.add_journalentry
- voiding requires accounting.change_journalentry
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import DOMAIN_ERRORS, domain_error_response, forbidden
from accounting.api.serializers import (
    BillApproveSerializer,
    BillPaymentSerializer,
    ExpenseSerializer,
    InvoiceIssueSerializer,
    InvoicePaymentSerializer,
    JournalEntrySerializer,
    VoidDocumentSerializer,
)
from accounting.models.journal import JournalEntry
from accounting.services import document_posting


def _entry_payload(entry: JournalEntry) -> dict:
    entry = (
        JournalEntry.objects.select_related("period")
        .prefetch_related("lines__account")
        .get(pk=entry.pk)
    )
    return JournalEntrySerializer(entry).data


class _DocumentPostView(GenericAPIView):
    """
    Subclasses set serializer_class, document_type, id_field and post_document.
    """

    permission_classes = [IsAuthenticated]
    document_type = ""
    id_field = ""

    def post_document(self, snapshot, user):
        raise NotImplementedError

    def post(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.add_journalentry"):
            return forbidden("You do not have permission to post documents.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        document_id = serializer.validated_data[self.id_field]

        already_posted = document_posting.find_entry_for_document(self.document_type, document_id) is not None

        try:
            entry = self.post_document(serializer.to_snapshot(), request.user)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        if entry is None:
            return Response({"detail": "Nothing to post."}, status=status.HTTP_200_OK)

        code = status.HTTP_200_OK if already_posted else status.HTTP_201_CREATED
        return Response(_entry_payload(entry), status=code)


@extend_schema(tags=["accounting"], responses={201: JournalEntrySerializer})
class InvoiceIssueView(_DocumentPostView):
    serializer_class = InvoiceIssueSerializer
    document_type = document_posting.INVOICE
    id_field = "invoice_id"

    def post_document(self, snapshot, user):
        return document_posting.issue_invoice(snapshot, created_by=user)


@extend_schema(tags=["accounting"], responses={201: JournalEntrySerializer})
class InvoicePaymentView(_DocumentPostView):
    serializer_class = InvoicePaymentSerializer
    document_type = document_posting.INVOICE_PAYMENT
    id_field = "payment_id"

    def post_document(self, snapshot, user):
        return document_posting.record_invoice_payment(snapshot, created_by=user)


@extend_schema(tags=["accounting"], responses={201: JournalEntrySerializer})
class BillApproveView(_DocumentPostView):
    serializer_class = BillApproveSerializer
    document_type = document_posting.BILL
    id_field = "bill_id"

    def post_document(self, snapshot, user):
        return document_posting.approve_bill(snapshot, created_by=user)


@extend_schema(tags=["accounting"], responses={201: JournalEntrySerializer})
class BillPaymentView(_DocumentPostView):
    serializer_class = BillPaymentSerializer
    document_type = document_posting.BILL_PAYMENT
    id_field = "payment_id"

    def post_document(self, snapshot, user):
        return document_posting.record_bill_payment(snapshot, created_by=user)


@extend_schema(tags=["accounting"], responses={201: JournalEntrySerializer})
class ExpenseCreateView(_DocumentPostView):
    serializer_class = ExpenseSerializer
    document_type = document_posting.EXPENSE
    id_field = "expense_id"

    def post_document(self, snapshot, user):
        return document_posting.record_expense(snapshot, created_by=user)


class _DocumentVoidView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = VoidDocumentSerializer

    def void_document(self, document_id, data, user):
        raise NotImplementedError

    @extend_schema(tags=["accounting"], request=VoidDocumentSerializer, responses={201: JournalEntrySerializer})
    def post(self, request, document_id, *args, **kwargs):
        if not request.user.has_perm("accounting.change_journalentry"):
            return forbidden("You do not have permission to void documents.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            reversal = self.void_document(document_id, serializer.validated_data, request.user)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(_entry_payload(reversal), status=status.HTTP_201_CREATED)


class InvoiceVoidView(_DocumentVoidView):
    def void_document(self, document_id, data, user):
        return document_posting.void_invoice(
            document_id, data.get("void_date"), created_by=user, reason=data.get("reason", "")
        )


class BillVoidView(_DocumentVoidView):
    def void_document(self, document_id, data, user):
        return document_posting.void_bill(
            document_id, data.get("void_date"), created_by=user, reason=data.get("reason", "")
        )
