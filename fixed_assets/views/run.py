# fixed_assets/views/run.py

"""
DEPRECIATION RUN VIEWSET

POST /api/fixed-assets/depreciation-runs/  {"period_end": "2024-01-31"}

One run per period end. Replaying the same period_end returns the existing
run with 200; the ledger entry is posted once.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import DOMAIN_ERRORS, domain_error_response
from accounting.api.permissions import HasActionPermission
from fixed_assets.models import DepreciationRun
from fixed_assets.serializers import DepreciationRunCreateSerializer, DepreciationRunSerializer
from fixed_assets.services.asset_service import run_depreciation


@extend_schema(tags=["fixed-assets"])
class DepreciationRunViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    serializer_class = DepreciationRunSerializer
    permission_classes = [IsAuthenticated, HasActionPermission]

    action_permissions = {
        "list": "fixed_assets.view_depreciationrun",
        "retrieve": "fixed_assets.view_depreciationrun",
        "create": "fixed_assets.add_depreciationrun",
    }

    queryset = DepreciationRun.objects.prefetch_related("charges__asset").order_by("-period_end")

    @extend_schema(request=DepreciationRunCreateSerializer, responses={201: DepreciationRunSerializer})
    def create(self, request, *args, **kwargs):
        serializer = DepreciationRunCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        period_end = serializer.validated_data["period_end"]

        already_run = DepreciationRun.objects.filter(period_end=period_end).exists()

        try:
            run = run_depreciation(period_end, created_by=request.user)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        run = self.get_queryset().get(pk=run.pk)
        code = status.HTTP_200_OK if already_run else status.HTTP_201_CREATED
        return Response(DepreciationRunSerializer(run).data, status=code)
