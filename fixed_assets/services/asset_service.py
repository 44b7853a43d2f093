# fixed_assets/services/asset_service.py

"""
======================================================
PATH: fixed_assets/services/asset_service.py
======================================================
FIXED ASSET LIFECYCLE

- register_asset(): asset + schedule (parameters validated), optional
  acquisition posting (Dr Fixed Assets / Cr funding account)
- run_depreciation(): one run per period end; charges every schedule period
  ending on or before that date that has not been charged yet (catch-up),
  then posts ONE entry keyed ("depreciation_run", run id)
- dispose_asset(): removes cost + accumulated depreciation, books proceeds
  and gain/loss, marks the asset disposed
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction

from accounting.adapters import (
    AssetAcquisitionSnapshot,
    AssetDisposalSnapshot,
    DepreciationRunItem,
    DepreciationRunSnapshot,
)
from accounting.services.document_posting import (
    post_depreciation_run,
    record_asset_acquisition,
    record_asset_disposal,
)
from accounting.services.exceptions import PostingRuleError
from accounting.services.money import ZERO, from_minor, money, to_minor
from fixed_assets.models import (
    DepreciationCharge,
    DepreciationRun,
    DepreciationSchedule,
    FixedAsset,
    UnitsOfProductionReading,
)
from fixed_assets.services.depreciation import InvalidDepreciationParametersError

logger = logging.getLogger(__name__)


@transaction.atomic
def register_asset(
    *,
    asset_number: str,
    name: str,
    acquisition_date: date,
    cost,
    useful_life_periods: int,
    method: str = DepreciationSchedule.Method.STRAIGHT_LINE,
    residual_value=ZERO,
    start_date: date | None = None,
    total_units=None,
    declining_factor=None,
    asset_account_code: str = "",
    expense_account_code: str = "",
    accumulated_account_code: str = "",
    funding_account_code: str | None = None,
    created_by=None,
) -> FixedAsset:
    """
    funding_account_code: when not None, the acquisition is posted against
    that account ("" = default BANK role).
    """
    try:
        asset = FixedAsset.objects.create(
            asset_number=asset_number,
            name=name,
            acquisition_date=acquisition_date,
            cost=money(cost),
            asset_account_code=asset_account_code or "",
            expense_account_code=expense_account_code or "",
            accumulated_account_code=accumulated_account_code or "",
        )
        DepreciationSchedule.objects.create(
            asset=asset,
            method=method,
            cost_basis=asset.cost,
            residual_value=money(residual_value),
            useful_life_periods=useful_life_periods,
            start_date=start_date or acquisition_date,
            total_units=total_units,
            declining_factor=declining_factor,
        )
    except ValidationError as exc:
        raise InvalidDepreciationParametersError("; ".join(exc.messages)) from exc

    if funding_account_code is not None:
        record_asset_acquisition(
            AssetAcquisitionSnapshot(
                asset_id=str(asset.pk),
                asset_name=asset.name,
                acquisition_date=asset.acquisition_date,
                cost=asset.cost,
                funding_account_code=funding_account_code,
                asset_account_code=asset.asset_account_code,
            ),
            created_by=created_by,
        )

    logger.info("Fixed asset registered", extra={"asset_id": asset.pk, "asset_number": asset.asset_number})
    return asset


def _due_periods(schedule: DepreciationSchedule, period_end: date, charged: set[int]):
    for period in schedule.calculator():
        if period.period_end > period_end:
            break
        if period.number in charged:
            continue
        yield period


@transaction.atomic
def run_depreciation(period_end: date, *, created_by=None) -> DepreciationRun:
    """
    Idempotent per period end: a second call returns the existing run.
    """
    existing = DepreciationRun.objects.select_for_update().filter(period_end=period_end).first()
    if existing is not None:
        logger.info("Depreciation run already exists", extra={"run_id": existing.pk, "period_end": str(period_end)})
        return existing

    run = DepreciationRun.objects.create(period_end=period_end, created_by=created_by)

    assets = list(
        FixedAsset.objects.select_for_update(of=("self",))
        .filter(status=FixedAsset.Status.ACTIVE, schedule__isnull=False, schedule__start_date__lte=period_end)
        .select_related("schedule")
        .order_by("asset_number")
    )

    charged_by_asset = defaultdict(set)
    for asset_id, number in DepreciationCharge.objects.filter(asset__in=assets).values_list(
        "asset_id", "period_number"
    ):
        charged_by_asset[asset_id].add(number)

    items = []
    charges = []
    for asset in assets:
        total_minor = 0
        for period in _due_periods(asset.schedule, period_end, charged_by_asset[asset.pk]):
            charges.append(
                DepreciationCharge(
                    run=run,
                    asset=asset,
                    period_number=period.number,
                    period_end=period.period_end,
                    amount=period.amount,
                )
            )
            total_minor += to_minor(period.amount)

        if total_minor > 0:
            items.append(
                DepreciationRunItem(
                    asset_id=str(asset.pk),
                    asset_name=asset.name,
                    amount=from_minor(total_minor),
                    expense_account_code=asset.expense_account_code,
                    accumulated_account_code=asset.accumulated_account_code,
                )
            )

    DepreciationCharge.objects.bulk_create(charges)

    snapshot = DepreciationRunSnapshot(run_id=str(run.pk), period_end=period_end, items=tuple(items))
    run.total_amount = snapshot.total
    run.save(update_fields=["total_amount"])

    entry = post_depreciation_run(snapshot, created_by=created_by)

    logger.info(
        "Depreciation run completed",
        extra={
            "run_id": run.pk,
            "period_end": str(period_end),
            "assets": len(items),
            "total": str(snapshot.total),
            "entry_id": entry.id if entry else None,
        },
    )
    return run


@transaction.atomic
def dispose_asset(
    asset_id,
    *,
    disposal_date: date,
    proceeds=ZERO,
    proceeds_account_code: str = "",
    created_by=None,
):
    """
    Book the disposal using depreciation charged so far. Run depreciation up
    to the disposal month first if the final months should be expensed.
    """
    asset = FixedAsset.objects.select_for_update().filter(pk=asset_id).first()
    if asset is None:
        raise PostingRuleError(f"Fixed asset {asset_id} not found")
    if asset.status != FixedAsset.Status.ACTIVE:
        raise PostingRuleError(f"Fixed asset {asset.asset_number} is already disposed")
    if disposal_date < asset.acquisition_date:
        raise PostingRuleError("disposal_date cannot be before acquisition_date")

    accumulated = money(asset.accumulated_depreciation)
    snapshot = AssetDisposalSnapshot(
        asset_id=str(asset.pk),
        asset_name=asset.name,
        disposal_date=disposal_date,
        cost=asset.cost,
        accumulated_depreciation=accumulated,
        proceeds=money(proceeds),
        proceeds_account_code=proceeds_account_code,
        asset_account_code=asset.asset_account_code,
        accumulated_account_code=asset.accumulated_account_code,
    )
    entry = record_asset_disposal(snapshot, created_by=created_by)

    asset.status = FixedAsset.Status.DISPOSED
    asset.disposed_on = disposal_date
    asset.disposal_proceeds = snapshot.proceeds
    asset.save(update_fields=["status", "disposed_on", "disposal_proceeds", "updated_at"])

    logger.info(
        "Fixed asset disposed",
        extra={
            "asset_id": asset.pk,
            "entry_id": entry.id,
            "gain_or_loss": str(snapshot.gain_or_loss),
        },
    )
    return entry


@transaction.atomic
def record_units_reading(asset_id, *, period_number: int, units) -> UnitsOfProductionReading:
    """
    Units consumed in one schedule period (units-of-production only).
    Charged periods are frozen.
    """
    schedule = DepreciationSchedule.objects.select_for_update().filter(asset_id=asset_id).first()
    if schedule is None:
        raise PostingRuleError(f"Fixed asset {asset_id} has no depreciation schedule")
    if schedule.method != DepreciationSchedule.Method.UNITS_OF_PRODUCTION:
        raise InvalidDepreciationParametersError("Unit readings only apply to units-of-production schedules")
    if not 1 <= period_number <= schedule.useful_life_periods:
        raise InvalidDepreciationParametersError(
            f"period_number must be between 1 and {schedule.useful_life_periods}"
        )
    if DepreciationCharge.objects.filter(asset_id=asset_id, period_number=period_number).exists():
        raise PostingRuleError(f"Period {period_number} is already charged; its reading is frozen")

    units = Decimal(str(units))
    if units < 0:
        raise InvalidDepreciationParametersError("units cannot be negative")

    reading, _ = UnitsOfProductionReading.objects.update_or_create(
        schedule=schedule, period_number=period_number, defaults={"units": units}
    )
    # Re-run calculator validation with the new reading in place.
    schedule.calculator()
    return reading


def preview_schedule(schedule: DepreciationSchedule) -> list[dict]:
    charged = dict(schedule.asset.depreciation_charges.values_list("period_number", "amount"))
    return [
        {
            "number": p.number,
            "period_end": p.period_end,
            "amount": p.amount,
            "accumulated": p.accumulated,
            "book_value": p.book_value,
            "charged": p.number in charged,
        }
        for p in schedule.calculator()
    ]


def asset_summary(asset: FixedAsset) -> dict:
    accumulated = money(asset.accumulated_depreciation)
    return {
        "cost": asset.cost,
        "accumulated_depreciation": accumulated,
        "book_value": money(Decimal(asset.cost) - accumulated),
    }
