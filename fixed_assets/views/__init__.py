# fixed_assets/views/__init__.py

from .asset import FixedAssetViewSet
from .run import DepreciationRunViewSet

__all__ = [
    "DepreciationRunViewSet",
    "FixedAssetViewSet",
]
