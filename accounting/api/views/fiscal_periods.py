# accounting/api/views/fiscal_periods.py

"""
PATH: accounting/api/views/fiscal_periods.py

FISCAL PERIODS API

GET  /api/accounting/fiscal-periods/            list
POST /api/accounting/fiscal-periods/            create one period
POST /api/accounting/fiscal-periods/year/       create twelve monthly periods
POST /api/accounting/fiscal-periods/<id>/close/
POST /api/accounting/fiscal-periods/<id>/reopen/

Closing optionally posts the closing entry (revenue/expense -> retained
earnings). Reopening is an explicit, logged administrative action.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import domain_error_response, forbidden, model_validation_response
from accounting.api.serializers.fiscal_periods import (
    ClosePeriodSerializer,
    FiscalPeriodCreateSerializer,
    FiscalPeriodSerializer,
    FiscalYearCreateSerializer,
)
from accounting.models.fiscal_period import FiscalPeriod
from accounting.services.exceptions import AccountingServiceError
from accounting.services.period_service import (
    close_period,
    create_fiscal_year,
    create_period,
    reopen_period,
)


class FiscalPeriodListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = FiscalPeriodSerializer

    @extend_schema(tags=["accounting"], responses=FiscalPeriodSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.view_fiscalperiod"):
            return forbidden("You do not have permission to view fiscal periods.")

        qs = FiscalPeriod.objects.order_by("start_date")
        return Response(FiscalPeriodSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=FiscalPeriodCreateSerializer,
        responses={201: FiscalPeriodSerializer},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.add_fiscalperiod"):
            return forbidden("You do not have permission to create fiscal periods.")

        serializer = FiscalPeriodCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            period = create_period(**serializer.validated_data)
        except DjangoValidationError as exc:
            return model_validation_response(exc)
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(FiscalPeriodSerializer(period).data, status=status.HTTP_201_CREATED)


class FiscalYearCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = FiscalYearCreateSerializer

    @extend_schema(
        tags=["accounting"],
        request=FiscalYearCreateSerializer,
        responses={201: FiscalPeriodSerializer(many=True)},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.add_fiscalperiod"):
            return forbidden("You do not have permission to create fiscal periods.")

        serializer = FiscalYearCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            periods = create_fiscal_year(serializer.validated_data["year"])
        except DjangoValidationError as exc:
            return model_validation_response(exc)
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(FiscalPeriodSerializer(periods, many=True).data, status=status.HTTP_201_CREATED)


class ClosePeriodView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ClosePeriodSerializer

    @extend_schema(tags=["accounting"], request=ClosePeriodSerializer, responses={200: FiscalPeriodSerializer})
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm("accounting.change_fiscalperiod"):
            return forbidden("You do not have permission to close fiscal periods.")

        serializer = ClosePeriodSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            period = close_period(
                pk,
                post_closing_entry=data.get("post_closing_entry", False),
                retained_earnings_code=data.get("retained_earnings_account_code"),
            )
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(FiscalPeriodSerializer(period).data, status=status.HTTP_200_OK)


class ReopenPeriodView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = FiscalPeriodSerializer

    @extend_schema(tags=["accounting"], request=None, responses={200: FiscalPeriodSerializer})
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm("accounting.change_fiscalperiod"):
            return forbidden("You do not have permission to reopen fiscal periods.")

        try:
            period = reopen_period(pk)
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(FiscalPeriodSerializer(period).data, status=status.HTTP_200_OK)
