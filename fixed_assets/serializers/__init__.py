# fixed_assets/serializers/__init__.py

from .asset import (
    AssetDisposalSerializer,
    AssetRegisterSerializer,
    DepreciationScheduleSerializer,
    FixedAssetSerializer,
    UnitsReadingSerializer,
)
from .run import DepreciationChargeSerializer, DepreciationRunCreateSerializer, DepreciationRunSerializer

__all__ = [
    "AssetDisposalSerializer",
    "AssetRegisterSerializer",
    "DepreciationChargeSerializer",
    "DepreciationRunCreateSerializer",
    "DepreciationRunSerializer",
    "DepreciationScheduleSerializer",
    "FixedAssetSerializer",
    "UnitsReadingSerializer",
]
