# fixed_assets/views/asset.py

"""
======================================================
PATH: fixed_assets/views/asset.py
======================================================
FIXED ASSET VIEWSET

GET  /api/fixed-assets/assets/                      list (?status=active)
POST /api/fixed-assets/assets/                      register (+ optional acquisition entry)
GET  /api/fixed-assets/assets/<id>/schedule/        full schedule preview
POST /api/fixed-assets/assets/<id>/unit-readings/   units-of-production reading
POST /api/fixed-assets/assets/<id>/dispose/         disposal entry + status change

Assets are never edited or deleted through the API once registered.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import DOMAIN_ERRORS, domain_error_response
from accounting.api.permissions import HasActionPermission
from accounting.api.serializers import JournalEntrySerializer
from fixed_assets.models import FixedAsset
from fixed_assets.serializers import (
    AssetDisposalSerializer,
    AssetRegisterSerializer,
    FixedAssetSerializer,
    UnitsReadingSerializer,
)
from fixed_assets.services.asset_service import (
    dispose_asset,
    preview_schedule,
    record_units_reading,
    register_asset,
)


@extend_schema(tags=["fixed-assets"])
class FixedAssetViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    serializer_class = FixedAssetSerializer
    permission_classes = [IsAuthenticated, HasActionPermission]
    filterset_fields = ("status",)

    action_permissions = {
        "list": "fixed_assets.view_fixedasset",
        "retrieve": "fixed_assets.view_fixedasset",
        "schedule": "fixed_assets.view_fixedasset",
        "create": "fixed_assets.add_fixedasset",
        "unit_readings": "fixed_assets.change_fixedasset",
        "dispose": "fixed_assets.change_fixedasset",
    }

    queryset = FixedAsset.objects.select_related("schedule").order_by("asset_number")

    @extend_schema(request=AssetRegisterSerializer, responses={201: FixedAssetSerializer})
    def create(self, request, *args, **kwargs):
        serializer = AssetRegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            asset = register_asset(**serializer.register_kwargs(), created_by=request.user)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(FixedAssetSerializer(asset).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: dict})
    @action(detail=True, methods=["get"])
    def schedule(self, request, pk=None):
        asset = self.get_object()
        rows = preview_schedule(asset.schedule)
        return Response(
            {
                "asset_id": asset.pk,
                "asset_number": asset.asset_number,
                "method": asset.schedule.method,
                "periods": [
                    {
                        "number": row["number"],
                        "period_end": row["period_end"].isoformat(),
                        "amount": str(row["amount"]),
                        "accumulated": str(row["accumulated"]),
                        "book_value": str(row["book_value"]),
                        "charged": row["charged"],
                    }
                    for row in rows
                ],
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(request=UnitsReadingSerializer, responses={200: dict})
    @action(detail=True, methods=["post"], url_path="unit-readings")
    def unit_readings(self, request, pk=None):
        asset = self.get_object()
        serializer = UnitsReadingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            reading = record_units_reading(asset.pk, **serializer.validated_data)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(
            {"period_number": reading.period_number, "units": str(reading.units)},
            status=status.HTTP_200_OK,
        )

    @extend_schema(request=AssetDisposalSerializer, responses={201: JournalEntrySerializer})
    @action(detail=True, methods=["post"])
    def dispose(self, request, pk=None):
        asset = self.get_object()
        serializer = AssetDisposalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            entry = dispose_asset(asset.pk, **serializer.validated_data, created_by=request.user)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(JournalEntrySerializer(entry).data, status=status.HTTP_201_CREATED)
