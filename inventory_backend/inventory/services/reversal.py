# inventory/services/reversal.py

"""
MOVEMENT REVERSAL (ANULACIÓN)

PURPOSE:
- Undo the stock effect of ONE prior entrada/salida without erasing history.

RULES:
- original stays in history, flagged cancelled=True (once, ever)
- a compensating anulacion_<type> record is appended
- reversal records themselves cannot be reversed
- product quantity must stay >= 0 after the compensation
- movement is matched by its id, never by (date, amount, type)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from inventory.models import Product, StockMovement
from inventory.services.errors import (
    CommitFailureError,
    InsufficientStockError,
    MovementNotReversibleError,
    NotFoundError,
    format_quantity,
)
from inventory.services.ledger import append_movement, lock_product, require_capability
from permissions.roles import CAP_INVENTORY_ADJUST

logger = logging.getLogger(__name__)

REVERSAL_SOURCE = "anulacion_manual"


@dataclass(frozen=True)
class ReversalResult:
    product: Product
    original: StockMovement
    reversal: StockMovement
    message: str


def _lock_movement(product: Product, movement_id) -> StockMovement:
    try:
        return (
            StockMovement.objects.select_for_update()
            .get(pk=movement_id, product_id=product.pk)
        )
    except (StockMovement.DoesNotExist, ValidationError, ValueError, TypeError):
        raise NotFoundError(
            f'Movimiento no encontrado en el historial de "{product.name}".'
        )


def cancel_movement(
    *,
    product_id,
    movement_id,
    user=None,
    capabilities=None,
) -> ReversalResult:
    """
    Reverse a past entrada/salida of a product.

    entrada N -> quantity - N, appends anulacion_entrada
    salida N  -> quantity + N, appends anulacion_salida
    """
    require_capability(capabilities, CAP_INVENTORY_ADJUST)

    try:
        with transaction.atomic():
            product = lock_product(product_id)
            original = _lock_movement(product, movement_id)

            if original.is_reversal or original.cancelled:
                raise MovementNotReversibleError(
                    "Este movimiento ya fue anulado o es una anulación."
                )

            if original.movement_type == StockMovement.MovementType.ENTRADA:
                adjustment = -original.amount
            else:
                adjustment = original.amount

            new_quantity = product.quantity + adjustment
            if new_quantity < 0:
                raise InsufficientStockError(
                    product_name=product.name,
                    requested=original.amount,
                    available=product.quantity,
                    message=(
                        "Anular este movimiento resultaría en stock negativo "
                        f"({format_quantity(new_quantity)}). Acción no permitida."
                    ),
                )

            if not original.flag_cancelled():
                # lost a race against another cancel of the same row
                raise MovementNotReversibleError(
                    "Este movimiento ya fue anulado o es una anulación."
                )

            reversal = append_movement(
                product=product,
                movement_type=StockMovement.REVERSAL_TYPE_FOR[original.movement_type],
                amount=original.amount,
                unit=original.unit,
                source=REVERSAL_SOURCE,
                user=user,
                cancelled_movement=original,
            )

            product.quantity = new_quantity
            product.save(update_fields=["quantity", "last_sequence", "updated_at"])
    except DatabaseError as exc:
        logger.exception(
            "Movement reversal commit failed",
            extra={"product_id": str(product_id), "movement_id": str(movement_id)},
        )
        raise CommitFailureError(
            "No se pudo anular el movimiento. Vuelve a cargar los datos e inténtalo de nuevo."
        ) from exc

    logger.info(
        "Movement reversed",
        extra={
            "product_id": str(product.pk),
            "movement_id": str(original.pk),
            "reversal_id": str(reversal.pk),
            "amount": str(original.amount),
            "quantity_after": str(product.quantity),
        },
    )

    return ReversalResult(
        product=product,
        original=original,
        reversal=reversal,
        message="Movimiento anulado con éxito.",
    )
