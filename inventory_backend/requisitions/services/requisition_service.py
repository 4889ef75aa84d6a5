# requisitions/services/requisition_service.py

"""
REQUISITION CREATION

- department is required (free text, e.g. Cocina, Barra, Pizzería)
- at least one item; each item names an existing product (by id or,
  failing that, by case-insensitive name) and a requested quantity > 0
- unit defaults to the product's unit
- no stock is touched here; fulfillment is a separate step
"""

from __future__ import annotations

import logging

from django.db import DatabaseError, transaction

from inventory.models import Product
from inventory.services.errors import LedgerValidationError, NotFoundError
from inventory.services.ledger import (
    commit_failure,
    find_product_by_name,
    is_valid_id,
    normalize_name,
    require_capability,
    to_positive_decimal,
)
from permissions.roles import CAP_INVENTORY_VIEW
from requisitions.models import Requisition, RequisitionItem

logger = logging.getLogger(__name__)


def _resolve_product(item: dict) -> Product:
    product_id = item.get("product_id") or item.get("productId")
    if product_id and is_valid_id(product_id):
        product = Product.objects.filter(pk=product_id).first()
        if product is not None:
            return product

    name = normalize_name(item.get("product_name") or item.get("productName"))
    product = find_product_by_name(name)
    if product is None:
        raise NotFoundError(f"Producto no encontrado: {name or product_id}")
    return product


def create_requisition(
    *,
    department,
    items,
    user=None,
    capabilities=None,
) -> Requisition:
    require_capability(capabilities, CAP_INVENTORY_VIEW)

    department = str(department or "").strip()
    if not department:
        raise LedgerValidationError("El departamento es obligatorio.")
    if not items:
        raise LedgerValidationError("La requisición debe tener al menos un producto.")

    lines = []
    for raw in items:
        product = _resolve_product(raw)
        quantity = to_positive_decimal(
            raw.get("quantity", raw.get("requested_quantity", raw.get("requestedQuantity"))),
            field_name=f"cantidad de {product.name}",
        )
        unit = str(raw.get("unit") or product.unit or "").strip()
        lines.append((product, quantity, unit))

    try:
        with transaction.atomic():
            requisition = Requisition.objects.create(
                department=department,
                created_by=user if getattr(user, "is_authenticated", False) else None,
            )
            RequisitionItem.objects.bulk_create(
                [
                    RequisitionItem(
                        requisition=requisition,
                        product=product,
                        product_name=product.name,
                        requested_quantity=quantity,
                        unit=unit,
                        position=position,
                    )
                    for position, (product, quantity, unit) in enumerate(lines)
                ]
            )
    except DatabaseError as exc:
        raise commit_failure(exc, operation="create_requisition", department=department) from exc

    logger.info(
        "Requisition created",
        extra={
            "requisition_id": str(requisition.pk),
            "department": department,
            "items": len(lines),
        },
    )
    return requisition
