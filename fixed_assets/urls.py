# fixed_assets/urls.py

"""
FIXED ASSET URLS

Register fixed asset routes under /api/fixed-assets/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from fixed_assets.views import DepreciationRunViewSet, FixedAssetViewSet

router = DefaultRouter()

router.register(r"assets", FixedAssetViewSet, basename="fixed-assets")
router.register(r"depreciation-runs", DepreciationRunViewSet, basename="depreciation-runs")

urlpatterns = [
    path("", include(router.urls)),
]
