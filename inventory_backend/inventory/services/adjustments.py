# inventory/services/adjustments.py

"""
QUICK UPDATE / MANUAL ADJUSTMENT

Purpose:
- Single-product entrada/salida from the quick-update panel, the product
  detail screen or the assistant.

Rules:
- amount is signed and non-zero (+N entrada, -N salida)
- manual entradas require inventory.adjust; salidas require inventory.edit
- tag is recorded as source (entrada) or destination (salida)
- routine manual adjustments (tag contains "ajuste_manual") are silent:
  notify=False, the caller shows nothing
"""

from __future__ import annotations

from dataclasses import dataclass

from inventory.models import Product, StockMovement
from inventory.services.ledger import (
    ZERO,
    apply_signed_movement,
    require_capability,
    to_decimal,
)
from inventory.services.errors import LedgerValidationError
from permissions.roles import CAP_INVENTORY_ADJUST, CAP_INVENTORY_EDIT

DEFAULT_TAG = "ajuste_manual"
SILENT_TAG_MARKER = "ajuste_manual"


@dataclass(frozen=True)
class AdjustmentResult:
    product: Product
    movement: StockMovement
    message: str
    notify: bool


def quick_update(
    *,
    product_id,
    amount,
    unit: str = "",
    tag: str = DEFAULT_TAG,
    user=None,
    capabilities=None,
) -> AdjustmentResult:
    signed = to_decimal(amount)
    if signed == ZERO:
        raise LedgerValidationError("Por favor, especifica una cantidad válida.")

    if signed > ZERO:
        require_capability(capabilities, CAP_INVENTORY_ADJUST)
    else:
        require_capability(capabilities, CAP_INVENTORY_EDIT)

    reason_tag = (tag or DEFAULT_TAG).strip()

    result = apply_signed_movement(
        product=product_id,
        signed_amount=signed,
        unit=unit,
        reason_tag=reason_tag,
        user=user,
    )

    action = "Entrada" if signed > ZERO else "Salida"
    return AdjustmentResult(
        product=result.product,
        movement=result.movement,
        message=f'{action} registrada para "{result.product.name}".',
        notify=SILENT_TAG_MARKER not in reason_tag,
    )
