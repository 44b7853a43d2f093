# PATH: accounting/api/view.py

"""
PATH: accounting/api/view.py

ACCOUNTING API VIEWSETS (AUDIT SAFE)

Journal entries:
- list/retrieve: every status (draft, posted, void), newest first
- create/update/destroy: manual DRAFT entries only
- POST {id}/post/: draft -> posted (validator runs here)
- POST {id}/reverse/: posted -> void + compensating reversal entry

Journal lines: read-only.

Filtering via django-filter:
    /api/accounting/journal-entries/?status=posted&date_from=2024-01-01
    /api/accounting/journal-lines/?account=1000&open_item=invoice:INV-1

Security rules:
- read requires accounting.view_journalentry / accounting.view_journalline
- draft create/update/delete requires add/change_journalentry
- post and reverse require accounting.change_journalentry
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import ReadOnlyModelViewSet

from accounting.api.errors import domain_error_response, forbidden
from accounting.api.filters import JournalEntryFilter, JournalLineFilter
from accounting.api.serializers import (
    DraftEntrySerializer,
    JournalEntrySerializer,
    JournalLineSerializer,
    ReverseEntrySerializer,
)
from accounting.models.journal import JournalEntry
from accounting.models.journal_line import JournalLine
from accounting.services.exceptions import AccountingServiceError
from accounting.services.posting_engine import (
    create_draft_entry,
    delete_draft_entry,
    post_draft_entry,
    update_draft_entry,
)
from accounting.services.reversal_service import reverse_entry


@extend_schema(tags=["accounting"])
class JournalEntryViewSet(ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntrySerializer
    filterset_class = JournalEntryFilter

    queryset = (
        JournalEntry.objects.select_related("period")
        .prefetch_related("lines__account")
        .order_by("-entry_date", "-id")
    )

    def get_queryset(self):
        if not self.request.user.has_perm("accounting.view_journalentry"):
            raise PermissionDenied("You do not have permission to view journal entries.")
        return super().get_queryset()

    def _entry_response(self, entry, code=status.HTTP_200_OK):
        entry = self.queryset.get(pk=entry.pk)
        return Response(JournalEntrySerializer(entry).data, status=code)

    @extend_schema(request=DraftEntrySerializer, responses={201: JournalEntrySerializer})
    def create(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.add_journalentry"):
            return forbidden("You do not have permission to create journal entries.")

        serializer = DraftEntrySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            entry = create_draft_entry(serializer.to_candidate(), created_by=request.user)
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return self._entry_response(entry, status.HTTP_201_CREATED)

    @extend_schema(request=DraftEntrySerializer, responses={200: JournalEntrySerializer})
    def update(self, request, pk=None, *args, **kwargs):
        if not request.user.has_perm("accounting.change_journalentry"):
            return forbidden("You do not have permission to edit journal entries.")

        serializer = DraftEntrySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            entry = update_draft_entry(pk, serializer.to_candidate())
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return self._entry_response(entry)

    def destroy(self, request, pk=None, *args, **kwargs):
        if not request.user.has_perm("accounting.delete_journalentry"):
            return forbidden("You do not have permission to delete journal entries.")

        try:
            delete_draft_entry(pk)
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: JournalEntrySerializer})
    @action(detail=True, methods=["post"], url_path="post")
    def post_entry(self, request, pk=None):
        if not request.user.has_perm("accounting.change_journalentry"):
            return forbidden("You do not have permission to post journal entries.")

        try:
            entry = post_draft_entry(pk, posted_by=request.user)
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return self._entry_response(entry)

    @extend_schema(request=ReverseEntrySerializer, responses={201: JournalEntrySerializer})
    @action(detail=True, methods=["post"])
    def reverse(self, request, pk=None):
        if not request.user.has_perm("accounting.change_journalentry"):
            return forbidden("You do not have permission to reverse journal entries.")

        serializer = ReverseEntrySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            reversal = reverse_entry(
                pk,
                serializer.validated_data.get("reversal_date"),
                created_by=request.user,
                reason=serializer.validated_data.get("reason", ""),
            )
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return self._entry_response(reversal, status.HTTP_201_CREATED)


@extend_schema(tags=["accounting"])
class JournalLineViewSet(ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = JournalLineSerializer
    filterset_class = JournalLineFilter

    queryset = JournalLine.objects.select_related("entry", "account").order_by(
        "-entry__entry_date", "-entry_id", "line_no"
    )

    def get_queryset(self):
        if not self.request.user.has_perm("accounting.view_journalline"):
            raise PermissionDenied("You do not have permission to view journal lines.")
        return super().get_queryset()
