# production/services/production_service.py

"""
======================================================
PATH: production/services/production_service.py
======================================================
PRODUCTION (TRANSFORMATION) SERVICE

Purpose:
- Consume a raw material and credit the resulting products, atomically.

Rules:
- raw material must exist and have quantity_used available
- every output needs a name and a quantity > 0
- outputs merge into existing products by case-insensitive name
  (entrada, source "Producción"); otherwise a product is created with
  min_stock 0 and category "Producción" unless one is given
- outputs with the same name in one run merge into one product
- waste is recorded only
- the Production record is written last, in the same transaction
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import DatabaseError, transaction

from inventory.models import StockMovement, product_name_key
from inventory.services import clock
from inventory.services.errors import LedgerValidationError, NotFoundError
from inventory.services.ledger import (
    ZERO,
    append_movement,
    commit_failure,
    ensure_available,
    find_product_by_name,
    insert_product,
    lock_products,
    normalize_name,
    require_capability,
    to_decimal,
    to_positive_decimal,
)
from permissions.roles import CAP_PRODUCTION_CREATE
from production.models import Production, ProductionOutput

logger = logging.getLogger(__name__)

PRODUCTION_TAG = "Producción"
DEFAULT_OUTPUT_CATEGORY = "Producción"


@dataclass(frozen=True)
class ProductionResult:
    production: Production
    movements: list
    created_products: list
    message: str


@dataclass
class _OutputLine:
    name: str
    quantity: Decimal
    unit: str
    category: str


def _parse_outputs(outputs) -> list[_OutputLine]:
    if not outputs:
        raise LedgerValidationError("Agrega al menos un producto resultante.")

    lines = []
    for raw in outputs:
        name = normalize_name(raw.get("product_name") or raw.get("productName") or raw.get("name"))
        if not name:
            raise LedgerValidationError("Cada producto resultante necesita un nombre.")
        quantity = to_positive_decimal(raw.get("quantity"), field_name=f"cantidad de {name}")
        lines.append(
            _OutputLine(
                name=name,
                quantity=quantity,
                unit=str(raw.get("unit") or "").strip(),
                category=str(raw.get("category") or "").strip(),
            )
        )
    return lines


def _parse_waste(waste):
    if not waste:
        return None, ""
    raw_quantity = waste.get("quantity")
    if raw_quantity in (None, ""):
        return None, ""
    quantity = to_decimal(raw_quantity, field_name="cantidad de merma")
    if quantity < ZERO:
        raise LedgerValidationError("La cantidad de merma no puede ser negativa.")
    return quantity, str(waste.get("unit") or "").strip()


def _merge_by_name(lines: list[_OutputLine]) -> dict:
    """{name key: _OutputLine} with quantities summed; first spelling wins."""
    merged: dict = {}
    for line in lines:
        key = product_name_key(line.name)
        if key in merged:
            merged[key].quantity += line.quantity
        else:
            merged[key] = _OutputLine(line.name, line.quantity, line.unit, line.category)
    return merged


def create_production(
    *,
    raw_material_id,
    quantity_used,
    outputs,
    waste=None,
    notes: str = "",
    user=None,
    capabilities=None,
) -> ProductionResult:
    require_capability(capabilities, CAP_PRODUCTION_CREATE)

    used = to_positive_decimal(quantity_used, field_name="cantidad utilizada")
    lines = _parse_outputs(outputs)
    waste_quantity, waste_unit = _parse_waste(waste)
    merged = _merge_by_name(lines)

    try:
        with transaction.atomic():
            existing_ids = []
            for key in merged:
                found = find_product_by_name(key)
                if found is not None:
                    existing_ids.append(found.pk)

            locked = lock_products([raw_material_id, *existing_ids])

            raw = locked.get(str(raw_material_id))
            if raw is None:
                raise NotFoundError("Materia prima no encontrada.")

            ensure_available(raw, used, message=f"Stock insuficiente para {raw.name}.")

            movements = [
                append_movement(
                    product=raw,
                    movement_type=StockMovement.MovementType.SALIDA,
                    amount=used,
                    unit=raw.unit,
                    destination=PRODUCTION_TAG,
                    user=user,
                )
            ]
            raw.quantity = Decimal(raw.quantity) - used
            touched = {str(raw.pk): raw}

            by_name = {product_name_key(p.name): p for p in locked.values()}
            created = []

            for key, line in merged.items():
                product = by_name.get(key)
                if product is not None:
                    movements.append(
                        append_movement(
                            product=product,
                            movement_type=StockMovement.MovementType.ENTRADA,
                            amount=line.quantity,
                            unit=line.unit or product.unit,
                            source=PRODUCTION_TAG,
                            user=user,
                        )
                    )
                    product.quantity = Decimal(product.quantity) + line.quantity
                    touched[str(product.pk)] = product
                    continue

                product = insert_product(
                    name=line.name,
                    unit=line.unit or raw.unit,
                    quantity=line.quantity,
                    min_stock=ZERO,
                    category=line.category or DEFAULT_OUTPUT_CATEGORY,
                    user=user,
                    source=PRODUCTION_TAG,
                )
                by_name[key] = product
                created.append(product)

            for product in touched.values():
                product.save(update_fields=["quantity", "last_sequence", "updated_at"])

            production = Production.objects.create(
                date=clock.now(),
                raw_material=raw,
                raw_material_name=raw.name,
                raw_material_unit=raw.unit,
                raw_material_quantity_used=used,
                waste_quantity=waste_quantity,
                waste_unit=waste_unit,
                notes=str(notes or "").strip(),
                created_by=user if getattr(user, "is_authenticated", False) else None,
            )
            ProductionOutput.objects.bulk_create(
                [
                    ProductionOutput(
                        production=production,
                        product=by_name[product_name_key(line.name)],
                        product_name=line.name,
                        quantity=line.quantity,
                        unit=line.unit or by_name[product_name_key(line.name)].unit,
                        category=line.category or DEFAULT_OUTPUT_CATEGORY,
                        position=position,
                    )
                    for position, line in enumerate(lines)
                ]
            )
    except DatabaseError as exc:
        raise commit_failure(
            exc, operation="create_production", raw_material_id=str(raw_material_id)
        ) from exc

    logger.info(
        "Production registered",
        extra={
            "production_id": str(production.pk),
            "raw_material_id": str(raw.pk),
            "quantity_used": str(used),
            "outputs": len(merged),
            "created_products": len(created),
        },
    )

    return ProductionResult(
        production=production,
        movements=movements,
        created_products=created,
        message="Producción registrada con éxito. El stock ha sido actualizado.",
    )
