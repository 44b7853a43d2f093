# accounting/api/views/accounts.py

"""
PATH: accounting/api/views/accounts.py

CHART OF ACCOUNTS API

GET  /api/accounting/accounts/                    list (?include_inactive=1)
POST /api/accounting/accounts/                    create
POST /api/accounting/accounts/<code>/deactivate/
POST /api/accounting/accounts/<code>/reactivate/

Accounts are never deleted; deactivation blocks new postings only.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import domain_error_response, forbidden, model_validation_response
from accounting.api.serializers.accounts import AccountSerializer
from accounting.models.account import Account
from accounting.services.chart_registry import create_account, deactivate_account, reactivate_account
from accounting.services.exceptions import AccountingServiceError


class AccountListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountSerializer

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(
                name="include_inactive",
                type=bool,
                required=False,
                description="Include deactivated accounts (default false).",
            ),
        ],
        responses=AccountSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.view_account"):
            return forbidden("You do not have permission to view accounts.")

        qs = Account.objects.order_by("code")
        if request.query_params.get("include_inactive") not in ("1", "true", "True"):
            qs = qs.filter(is_active=True)

        return Response(AccountSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=AccountSerializer, responses={201: AccountSerializer})
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.add_account"):
            return forbidden("You do not have permission to create accounts.")

        serializer = AccountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            account = create_account(
                code=data["code"],
                name=data["name"],
                account_type=data["account_type"],
                subtype=data.get("subtype", ""),
            )
        except DjangoValidationError as exc:
            return model_validation_response(exc)

        return Response(AccountSerializer(account).data, status=status.HTTP_201_CREATED)


class AccountStatusView(GenericAPIView):
    """
    POST with `active` bound via urls.py (deactivate -> False, reactivate -> True).
    """

    permission_classes = [IsAuthenticated]
    serializer_class = AccountSerializer
    active = False

    @extend_schema(tags=["accounting"], request=None, responses={200: AccountSerializer})
    def post(self, request, code, *args, **kwargs):
        if not request.user.has_perm("accounting.change_account"):
            return forbidden("You do not have permission to change accounts.")

        try:
            account = reactivate_account(code) if self.active else deactivate_account(code)
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(AccountSerializer(account).data, status=status.HTTP_200_OK)
