"""
PATH: fixed_assets/models/__init__.py

Fixed asset models export surface.
"""

from .asset import FixedAsset
from .depreciation import DepreciationCharge, DepreciationRun, DepreciationSchedule, UnitsOfProductionReading

__all__ = [
    "FixedAsset",
    "DepreciationSchedule",
    "UnitsOfProductionReading",
    "DepreciationRun",
    "DepreciationCharge",
]
