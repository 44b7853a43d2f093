# inventory/services/fifo_costing.py

"""
FIFO COSTING ENGINE

Purpose:
- Receive stock into cost layers (one layer per receipt line)
- Issue stock oldest-layer-first and report the FIFO cost of goods issued
- Restore an issue to its ORIGINAL layers at their ORIGINAL unit cost
- Remove a voided receipt's layers (only while they are untouched)

Rules:
- Integer-only quantities (InventoryMovement.quantity is PositiveIntegerField)
- Layers are locked with select_for_update in FIFO order before any mutation
- Availability is checked BEFORE any layer is touched; an insufficient issue
  leaves every layer exactly as it was
- Every movement carries unit_cost_snapshot copied from its layer
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.db.models import DecimalField, F, Sum

from accounting.services.money import ZERO, from_minor, money, to_minor
from inventory.models import InventoryCostLayer, InventoryMovement, Product

logger = logging.getLogger(__name__)


# ============================================================
# DOMAIN ERRORS
# ============================================================

class InsufficientStockError(Exception):
    def __init__(self, message: str, *, requested: int = 0, available: int = 0):
        super().__init__(message)
        self.requested = requested
        self.available = available


class StockRestorationError(Exception):
    pass


class CostLayerConsumedError(Exception):
    pass


def _to_int_qty(value) -> int:
    """
    HARD RULE: quantities are integer units in this system.
    """
    if value is None or value == "":
        return 0

    if isinstance(value, bool):
        raise ValueError("quantity must be a whole integer unit")

    if isinstance(value, int):
        return value

    if isinstance(value, Decimal) and value == value.to_integral_value():
        return int(value)

    if isinstance(value, str):
        s = value.strip()
        if s.isdigit():
            return int(s)

    raise ValueError("quantity must be a whole integer unit")


def _source(source_type, source_id) -> tuple[str, str]:
    st = str(source_type or "").strip()
    sid = str(source_id or "").strip()
    if not st or not sid:
        raise ValueError("source_type and source_id are required")
    return st, sid


# ============================================================
# PURE PLANNING
# ============================================================

@dataclass(frozen=True)
class PlannedDraw:
    layer_id: object
    quantity: int
    unit_cost: Decimal

    @property
    def cost(self) -> Decimal:
        return money(Decimal(self.quantity) * self.unit_cost)


def plan_fifo_issue(layers, quantity) -> list[PlannedDraw]:
    """
    layers: ordered iterable of (layer_id, remaining_qty, unit_cost), oldest first.

    Returns the draws needed to satisfy `quantity`. Raises InsufficientStockError
    when the layers cannot cover it. Never touches the database.
    """
    qty = _to_int_qty(quantity)
    if qty <= 0:
        raise ValueError("quantity must be >= 1")

    layers = list(layers)
    available = sum(max(int(remaining or 0), 0) for _, remaining, _ in layers)
    if available < qty:
        raise InsufficientStockError(
            f"Insufficient stock. Requested: {qty}, Available: {available}",
            requested=qty,
            available=available,
        )

    draws = []
    outstanding = qty
    for layer_id, remaining, unit_cost in layers:
        if outstanding <= 0:
            break
        remaining = int(remaining or 0)
        if remaining <= 0:
            continue
        take = remaining if remaining <= outstanding else outstanding
        draws.append(PlannedDraw(layer_id=layer_id, quantity=take, unit_cost=money(unit_cost)))
        outstanding -= take

    return draws


# ============================================================
# RECEIPTS
# ============================================================

@transaction.atomic
def receive_stock(
    *,
    product: Product,
    quantity,
    unit_cost,
    received_date: date,
    source_type: str,
    source_id: str,
) -> InventoryCostLayer:
    if product is None:
        raise ValueError("product is required")
    if not product.is_stocked:
        raise ValueError(f"{product.name} is not a physical-stock product")

    qty = _to_int_qty(quantity)
    if qty <= 0:
        raise ValueError("quantity must be >= 1")

    cost = money(unit_cost)
    if cost < ZERO:
        raise ValueError("unit_cost must be >= 0")

    st, sid = _source(source_type, source_id)

    layer = InventoryCostLayer.objects.create(
        product=product,
        received_date=received_date,
        quantity_received=qty,
        quantity_remaining=qty,
        unit_cost=cost,
        source_type=st,
        source_id=sid,
    )

    InventoryMovement.objects.create(
        product=product,
        layer=layer,
        movement_type=InventoryMovement.MovementType.IN,
        reason=InventoryMovement.Reason.RECEIPT,
        quantity=qty,
        unit_cost_snapshot=cost,
        source_type=st,
        source_id=sid,
    )

    logger.info(
        "Stock received",
        extra={"product_id": str(product.id), "layer_id": str(layer.id), "quantity": qty},
    )
    return layer


# ============================================================
# FIFO ISSUE
# ============================================================

@dataclass(frozen=True)
class IssueResult:
    product_id: object
    quantity: int
    movements: tuple

    @property
    def total_cost(self) -> Decimal:
        minor = sum(to_minor(m.total_cost) for m in self.movements)
        return from_minor(minor)


@transaction.atomic
def issue_stock_fifo(*, product: Product, quantity, source_type: str, source_id: str) -> IssueResult:
    """
    Consume `quantity` units oldest layer first.

    The product's open layers are locked in FIFO order before planning, so two
    concurrent issues serialize and cannot both draw the same units.
    """
    if product is None:
        raise ValueError("product is required")

    st, sid = _source(source_type, source_id)

    layer_list = list(
        InventoryCostLayer.objects.select_for_update()
        .filter(product=product, is_voided=False, quantity_remaining__gt=0)
        .order_by("received_date", "created_at", "id")
    )
    by_id = {layer.id: layer for layer in layer_list}

    try:
        draws = plan_fifo_issue(
            ((layer.id, layer.quantity_remaining, layer.unit_cost) for layer in layer_list),
            quantity,
        )
    except InsufficientStockError as exc:
        logger.warning(
            "Issue rejected: insufficient stock",
            extra={"product_id": str(product.id), "requested": exc.requested, "available": exc.available},
        )
        raise InsufficientStockError(
            f"Insufficient stock for {product.name}. "
            f"Requested: {exc.requested}, Available: {exc.available}",
            requested=exc.requested,
            available=exc.available,
        ) from exc

    movements = []
    for draw in draws:
        layer = by_id[draw.layer_id]
        layer.quantity_remaining = int(layer.quantity_remaining) - draw.quantity
        layer.save(update_fields=["quantity_remaining"])

        movements.append(
            InventoryMovement.objects.create(
                product=product,
                layer=layer,
                movement_type=InventoryMovement.MovementType.OUT,
                reason=InventoryMovement.Reason.ISSUE,
                quantity=draw.quantity,
                unit_cost_snapshot=layer.unit_cost,
                source_type=st,
                source_id=sid,
            )
        )

    result = IssueResult(product_id=product.id, quantity=sum(d.quantity for d in draws), movements=tuple(movements))
    logger.info(
        "Stock issued (FIFO)",
        extra={"product_id": str(product.id), "quantity": result.quantity, "cost": str(result.total_cost)},
    )
    return result


# ============================================================
# ISSUE REVERSAL
# ============================================================

@transaction.atomic
def reverse_issue(*, source_type: str, source_id: str) -> list[InventoryMovement]:
    """
    Restore every unit issued under (source_type, source_id) back to the layer
    it came from, at that layer's original unit cost.

    Already-restored quantities are subtracted, so a repeated call raises
    instead of restoring twice.
    """
    st, sid = _source(source_type, source_id)

    issues = list(
        InventoryMovement.objects.filter(
            source_type=st,
            source_id=sid,
            reason=InventoryMovement.Reason.ISSUE,
        )
        .values("layer_id", "product_id", "unit_cost_snapshot")
        .annotate(total_qty=Sum("quantity"))
        .order_by("layer_id")
    )
    if not issues:
        raise StockRestorationError(f"No issue movements found for {st}:{sid}")

    returned = defaultdict(int)
    for row in (
        InventoryMovement.objects.filter(
            source_type=st,
            source_id=sid,
            reason=InventoryMovement.Reason.RETURN,
        )
        .values("layer_id")
        .annotate(total_qty=Sum("quantity"))
    ):
        returned[row["layer_id"]] = int(row["total_qty"] or 0)

    layers = {
        layer.id: layer
        for layer in InventoryCostLayer.objects.select_for_update()
        .filter(id__in=[row["layer_id"] for row in issues])
        .order_by("id")
    }

    created = []
    for row in issues:
        restore_qty = int(row["total_qty"] or 0) - returned[row["layer_id"]]
        if restore_qty <= 0:
            continue

        layer = layers[row["layer_id"]]
        if layer.is_voided:
            raise StockRestorationError(f"Cannot restore into voided layer {layer.id}")

        layer.quantity_remaining = int(layer.quantity_remaining) + restore_qty
        layer.save(update_fields=["quantity_remaining"])

        created.append(
            InventoryMovement.objects.create(
                product_id=row["product_id"],
                layer=layer,
                movement_type=InventoryMovement.MovementType.IN,
                reason=InventoryMovement.Reason.RETURN,
                quantity=restore_qty,
                unit_cost_snapshot=layer.unit_cost,
                source_type=st,
                source_id=sid,
            )
        )

    if not created:
        raise StockRestorationError(f"Issue {st}:{sid} has already been fully restored")

    logger.info(
        "Stock issue reversed",
        extra={"source": f"{st}:{sid}", "movements": len(created)},
    )
    return created


# ============================================================
# RECEIPT VOID
# ============================================================

@transaction.atomic
def remove_receipt_layers(*, source_type: str, source_id: str) -> list[InventoryCostLayer]:
    """
    Void every layer opened by (source_type, source_id).

    Blocked with CostLayerConsumedError as soon as any unit of any of those
    layers has been issued. Nothing is changed in that case.
    """
    st, sid = _source(source_type, source_id)

    layers = list(
        InventoryCostLayer.objects.select_for_update()
        .filter(source_type=st, source_id=sid, is_voided=False)
        .order_by("received_date", "created_at", "id")
    )

    consumed = [layer for layer in layers if layer.quantity_remaining < layer.quantity_received]
    if consumed:
        logger.warning(
            "Receipt void rejected: layers already consumed",
            extra={"source": f"{st}:{sid}", "layers": [str(layer.id) for layer in consumed]},
        )
        raise CostLayerConsumedError(
            f"Cannot void {st}:{sid}: {len(consumed)} cost layer(s) already partially consumed"
        )

    for layer in layers:
        qty = int(layer.quantity_remaining)
        layer.quantity_remaining = 0
        layer.is_voided = True
        layer.save(update_fields=["quantity_remaining", "is_voided"])

        InventoryMovement.objects.create(
            product_id=layer.product_id,
            layer=layer,
            movement_type=InventoryMovement.MovementType.OUT,
            reason=InventoryMovement.Reason.VOID,
            quantity=qty,
            unit_cost_snapshot=layer.unit_cost,
            source_type=st,
            source_id=sid,
        )

    if layers:
        logger.info("Receipt layers voided", extra={"source": f"{st}:{sid}", "layers": len(layers)})
    return layers


# ============================================================
# VALUATION
# ============================================================

@dataclass(frozen=True)
class ProductValuation:
    product_id: object
    sku: str
    name: str
    quantity_on_hand: int
    value: Decimal


def get_inventory_valuation(product: Product | None = None) -> list[ProductValuation]:
    qs = InventoryCostLayer.objects.filter(is_voided=False, quantity_remaining__gt=0)
    if product is not None:
        qs = qs.filter(product=product)

    rows = (
        qs.values("product_id", "product__sku", "product__name")
        .annotate(
            qty=Sum("quantity_remaining"),
            value=Sum(
                F("quantity_remaining") * F("unit_cost"),
                output_field=DecimalField(max_digits=18, decimal_places=2),
            ),
        )
        .order_by("product__name", "product_id")
    )

    return [
        ProductValuation(
            product_id=row["product_id"],
            sku=row["product__sku"],
            name=row["product__name"],
            quantity_on_hand=int(row["qty"] or 0),
            value=money(row["value"] or ZERO),
        )
        for row in rows
    ]


def quantity_on_hand(product: Product) -> int:
    total = (
        InventoryCostLayer.objects.filter(product=product, is_voided=False)
        .aggregate(total=Sum("quantity_remaining"))
        .get("total")
    )
    return int(total or 0)
