# requisitions/services/fulfillment.py

"""
======================================================
PATH: requisitions/services/fulfillment.py
======================================================
REQUISITION FULFILLMENT

Purpose:
- Deliver a pending requisition: one salida per delivered item,
  destination = the requesting department.

Passes (all inside ONE transaction.atomic, after the row locks):
1. validation  - delivered quantities are numbers >= 0 (blank counts as 0)
2. resolution  - product by id, else by case-insensitive name (once)
3. stock       - per product, total delivered <= quantity
4. commit      - salidas, item records, status completed

Any failure in 1-3 leaves everything untouched.
Zero-delivered and unresolved items are recorded without a movement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from inventory.models import StockMovement
from inventory.services import clock
from inventory.services.errors import LedgerValidationError, NotFoundError
from inventory.services.ledger import (
    ZERO,
    append_movement,
    commit_failure,
    ensure_available,
    find_product_by_name,
    lock_products,
    require_capability,
    to_decimal,
)
from permissions.roles import CAP_REQUISITIONS_PROCESS
from requisitions.models import Requisition, RequisitionItem
from requisitions.services.requisition_lifecycle import validate_transition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FulfillmentResult:
    requisition: Requisition
    movements: list
    message: str


def _lock_requisition(requisition_id) -> Requisition:
    try:
        return Requisition.objects.select_for_update().get(pk=requisition_id)
    except (Requisition.DoesNotExist, ValidationError, ValueError, TypeError):
        raise NotFoundError(f"Requisición no encontrada: {requisition_id}")


def _delivery_for(deliveries: dict, item: RequisitionItem) -> dict:
    """Deliveries are keyed by product id; item id works for orphaned items."""
    for key in (item.product_id, item.pk):
        if key is not None and str(key) in deliveries:
            return deliveries[str(key)] or {}
    return {}


def _parse_delivered(entry: dict, item: RequisitionItem) -> Decimal:
    """A blank or missing delivered quantity means nothing was delivered."""
    raw = entry.get("delivered_quantity", entry.get("deliveredQuantity"))
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return ZERO
    try:
        delivered = to_decimal(raw)
    except LedgerValidationError:
        raise LedgerValidationError(f"Cantidad inválida para {item.product_name}.")
    if delivered < ZERO:
        raise LedgerValidationError(f"Cantidad inválida para {item.product_name}.")
    return delivered


def process_requisition(
    *,
    requisition_id,
    deliveries,
    user=None,
    capabilities=None,
) -> FulfillmentResult:
    require_capability(capabilities, CAP_REQUISITIONS_PROCESS)

    deliveries = {str(k): v for k, v in (deliveries or {}).items()}

    try:
        with transaction.atomic():
            requisition = _lock_requisition(requisition_id)
            validate_transition(
                requisition=requisition,
                target_status=Requisition.Status.COMPLETED,
            )
            items = list(requisition.items.order_by("position"))

            # 1. validation
            lines = []
            for item in items:
                entry = _delivery_for(deliveries, item)
                lines.append(
                    (item, _parse_delivered(entry, item), str(entry.get("observation") or "").strip())
                )

            # 2. resolution (id first, name as fallback), then lock in pk order
            resolved_ids = {}
            for item, _, _ in lines:
                product_id = item.product_id
                if product_id is None:
                    by_name = find_product_by_name(item.product_name)
                    product_id = by_name.pk if by_name else None
                resolved_ids[item.pk] = product_id

            locked = lock_products(pid for pid in resolved_ids.values() if pid)

            # 3. stock, aggregated per product
            totals: dict = {}
            for item, delivered, _ in lines:
                product = locked.get(str(resolved_ids[item.pk]))
                if product is None or delivered <= ZERO:
                    continue
                key = str(product.pk)
                totals[key] = totals.get(key, ZERO) + delivered
                ensure_available(
                    product,
                    totals[key],
                    message=f'Stock insuficiente para "{product.name}". No se puede procesar.',
                )

            # 4. commit
            movements = []
            touched = {}
            for item, delivered, observation in lines:
                product = locked.get(str(resolved_ids[item.pk]))

                if product is not None and delivered > ZERO:
                    movements.append(
                        append_movement(
                            product=product,
                            movement_type=StockMovement.MovementType.SALIDA,
                            amount=delivered,
                            unit=item.unit,
                            destination=requisition.department,
                            user=user,
                        )
                    )
                    product.quantity = Decimal(product.quantity) - delivered
                    touched[str(product.pk)] = product

                item.product = product
                item.delivered_quantity = delivered
                item.observation = observation[:255]
                item.save(update_fields=["product", "delivered_quantity", "observation"])

            for product in touched.values():
                product.save(update_fields=["quantity", "last_sequence", "updated_at"])

            requisition.status = Requisition.Status.COMPLETED
            requisition.processed_at = clock.now()
            requisition.processed_by = user if getattr(user, "is_authenticated", False) else None
            requisition.save(update_fields=["status", "processed_at", "processed_by"])
    except DatabaseError as exc:
        raise commit_failure(
            exc, operation="process_requisition", requisition_id=str(requisition_id)
        ) from exc

    logger.info(
        "Requisition processed",
        extra={
            "requisition_id": str(requisition.pk),
            "department": requisition.department,
            "movements": len(movements),
        },
    )

    return FulfillmentResult(
        requisition=requisition,
        movements=movements,
        message="Requisición procesada y stock actualizado.",
    )
