# inventory/services/ledger.py

"""
======================================================
PATH: inventory/services/ledger.py
======================================================
PRODUCT LEDGER (CORE)

Purpose:
- Create / delete products.
- Apply a signed stock change as ONE immutable movement + new balance.
- Shared primitives (locking, movement append, number coercion) used by
  reversal, requisition fulfillment, production and the assistant.

Rules:
- quantity never goes below zero (checked after the row lock).
- every balance change appends exactly one StockMovement.
- movements get the product's next sequence number.
- writes happen inside transaction.atomic; DatabaseError -> CommitFailureError.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction

from inventory.models import Product, StockMovement, product_name_key
from inventory.services import clock
from inventory.services.errors import (
    CommitFailureError,
    InsufficientStockError,
    LedgerValidationError,
    NotFoundError,
    OperationNotPermittedError,
)
from permissions.roles import CAP_INVENTORY_DELETE, CAP_INVENTORY_EDIT, has_capability

logger = logging.getLogger(__name__)

QUANTITY_STEP = Decimal("0.001")
MAX_QUANTITY = Decimal("1000000000")
ZERO = Decimal("0")


@dataclass(frozen=True)
class MovementResult:
    product: Product
    movement: StockMovement


# ======================================================
# COERCION HELPERS
# ======================================================

def to_decimal(value, *, field_name: str = "cantidad") -> Decimal:
    """
    Parse a user-supplied number.
    bool, NaN and infinities are rejected; result is quantized to 3 places.
    """
    if value is None or value == "" or isinstance(value, bool):
        raise LedgerValidationError(f"Se requiere un valor numérico para {field_name}.")
    try:
        d = Decimal(str(value).strip().replace(",", "."))
    except (InvalidOperation, ValueError):
        raise LedgerValidationError(f"Valor inválido para {field_name}.")
    if not d.is_finite() or abs(d) >= MAX_QUANTITY:
        raise LedgerValidationError(f"Valor inválido para {field_name}.")
    return d.quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP)


def to_decimal_or_default(value, default: Decimal) -> Decimal:
    """Lenient variant: invalid, absent or negative values fall back to default."""
    try:
        d = to_decimal(value)
    except LedgerValidationError:
        return default
    if d < ZERO:
        return default
    return d


def to_positive_decimal(value, *, field_name: str = "cantidad") -> Decimal:
    d = to_decimal(value, field_name=field_name)
    if d <= ZERO:
        raise LedgerValidationError(f"El valor de {field_name} debe ser mayor que cero.")
    return d


def default_min_stock() -> Decimal:
    return to_decimal_or_default(
        getattr(settings, "INVENTORY_DEFAULT_MIN_STOCK", "5"), Decimal("5.000")
    )


def normalize_name(name) -> str:
    return str(name or "").strip()


# ======================================================
# CAPABILITIES
# ======================================================

def require_capability(capabilities: Optional[Iterable[str]], capability: str) -> None:
    if not has_capability(capabilities, capability):
        raise OperationNotPermittedError(
            "No tienes permiso para realizar esta operación."
        )


# ======================================================
# LOOKUPS + LOCKING
# ======================================================

def get_product(product_id) -> Product:
    try:
        return Product.objects.get(pk=product_id)
    except (Product.DoesNotExist, ValidationError, ValueError, TypeError):
        raise NotFoundError(f"Producto no encontrado: {product_id}")


def find_product_by_name(name, *, for_update: bool = False) -> Optional[Product]:
    cleaned = normalize_name(name)
    if not cleaned:
        return None
    qs = Product.objects.filter(name_key=product_name_key(cleaned))
    if for_update:
        qs = qs.select_for_update()
    return qs.first()


def is_valid_id(value) -> bool:
    try:
        uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return False
    return True


def lock_products(product_ids: Iterable) -> dict:
    """
    Lock every product row in primary-key order (deadlock-free for batches).
    Returns {str(pk): Product}.
    """
    ids = {str(pid) for pid in product_ids if is_valid_id(pid)}
    if not ids:
        return {}
    locked = Product.objects.select_for_update().filter(pk__in=ids).order_by("pk")
    return {str(p.pk): p for p in locked}


def lock_product(product_id) -> Product:
    locked = lock_products([product_id]).get(str(product_id))
    if locked is None:
        raise NotFoundError(f"Producto no encontrado: {product_id}")
    return locked


# ======================================================
# MOVEMENT PRIMITIVES (call inside transaction.atomic)
# ======================================================

def append_movement(
    *,
    product: Product,
    movement_type: str,
    amount: Decimal,
    unit: str = "",
    source: str = "",
    destination: str = "",
    user=None,
    cancelled_movement: Optional[StockMovement] = None,
    date=None,
) -> StockMovement:
    """
    Append one movement to a LOCKED product.
    Reserves the next sequence; caller persists the product afterwards.
    """
    return StockMovement.objects.create(
        product=product,
        movement_type=movement_type,
        amount=amount,
        unit=(unit or product.unit or "").strip(),
        date=date or clock.now(),
        sequence=product.next_sequence(),
        source=(source or "")[:120],
        destination=(destination or "")[:120],
        performed_by=user if getattr(user, "is_authenticated", False) else None,
        cancelled_movement=cancelled_movement,
        cancelled_movement_date=cancelled_movement.date if cancelled_movement else None,
    )


def ensure_available(product: Product, requested: Decimal, *, message: str = "") -> None:
    available = Decimal(product.quantity or 0)
    if requested > available:
        raise InsufficientStockError(
            product_name=product.name,
            requested=requested,
            available=available,
            message=message,
        )


def post_signed_change(
    *,
    product: Product,
    signed_amount: Decimal,
    unit: str = "",
    reason_tag: str = "",
    user=None,
) -> StockMovement:
    """
    Apply a non-zero signed change to a LOCKED product and save it.
    Positive -> entrada (source=tag); negative -> salida (destination=tag).
    """
    if signed_amount == ZERO:
        raise LedgerValidationError("La cantidad no puede ser cero.")

    amount = abs(signed_amount)

    if signed_amount < ZERO:
        ensure_available(product, amount)
        movement = append_movement(
            product=product,
            movement_type=StockMovement.MovementType.SALIDA,
            amount=amount,
            unit=unit,
            destination=reason_tag,
            user=user,
        )
    else:
        movement = append_movement(
            product=product,
            movement_type=StockMovement.MovementType.ENTRADA,
            amount=amount,
            unit=unit,
            source=reason_tag,
            user=user,
        )

    product.quantity = Decimal(product.quantity or 0) + signed_amount
    product.save(update_fields=["quantity", "last_sequence", "updated_at"])
    return movement


# LogRecord attributes; logging raises KeyError if extra= tries to set them.
RESERVED_LOG_KEYS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


def safe_log_extra(**extra) -> dict:
    """Prefix keys that would clash with LogRecord attributes."""
    return {
        (f"ctx_{key}" if key in RESERVED_LOG_KEYS else key): value
        for key, value in extra.items()
    }


def commit_failure(exc: DatabaseError, *, operation: str, **extra) -> CommitFailureError:
    logger.exception(
        "Inventory commit failed",
        extra=safe_log_extra(operation=operation, **extra),
    )
    return CommitFailureError(
        "No se pudo guardar la operación. Vuelve a cargar los datos e inténtalo de nuevo."
    )


# ======================================================
# PUBLIC OPERATIONS
# ======================================================

def apply_signed_movement(
    *,
    product,
    signed_amount,
    unit: str = "",
    reason_tag: str = "",
    user=None,
) -> MovementResult:
    """
    Apply a signed quantity change as one movement.

    product may be a Product or its id; the row is re-read under lock.
    Nothing is written if the result would be negative.
    """
    product_id = getattr(product, "pk", product)
    amount = to_decimal(signed_amount)
    if amount == ZERO:
        raise LedgerValidationError("La cantidad no puede ser cero.")

    try:
        with transaction.atomic():
            locked = lock_product(product_id)
            movement = post_signed_change(
                product=locked,
                signed_amount=amount,
                unit=unit,
                reason_tag=reason_tag,
                user=user,
            )
    except DatabaseError as exc:
        raise commit_failure(
            exc, operation="apply_signed_movement", product_id=str(product_id)
        ) from exc

    logger.info(
        "Stock movement applied",
        extra={
            "product_id": str(locked.pk),
            "movement_type": movement.movement_type,
            "amount": str(movement.amount),
            "reason_tag": reason_tag,
            "quantity_after": str(locked.quantity),
        },
    )
    return MovementResult(product=locked, movement=movement)


def create_product(
    *,
    name,
    unit,
    initial_quantity=None,
    min_stock=None,
    category: str = "",
    user=None,
    capabilities=None,
) -> Product:
    """
    Create a product with a single seeding entrada of initial_quantity.

    - name trimmed; empty or duplicate (case-insensitive) -> LedgerValidationError
    - invalid/absent/negative initial_quantity -> 0
    - invalid/absent/negative min_stock -> configured default (5)
    """
    require_capability(capabilities, CAP_INVENTORY_EDIT)

    cleaned_name = normalize_name(name)
    if not cleaned_name:
        raise LedgerValidationError("El nombre del producto es obligatorio.")

    cleaned_unit = str(unit or "").strip()
    if not cleaned_unit:
        raise LedgerValidationError("La unidad del producto es obligatoria.")

    quantity = to_decimal_or_default(initial_quantity, ZERO)
    minimum = to_decimal_or_default(min_stock, default_min_stock())

    try:
        with transaction.atomic():
            product = insert_product(
                name=cleaned_name,
                unit=cleaned_unit,
                quantity=quantity,
                min_stock=minimum,
                category=str(category or "").strip(),
                user=user,
            )
    except IntegrityError as exc:
        raise LedgerValidationError(
            f'Ya existe un producto llamado "{cleaned_name}".'
        ) from exc
    except DatabaseError as exc:
        raise commit_failure(exc, operation="create_product", product_name=cleaned_name) from exc

    logger.info(
        "Product created",
        extra={
            "product_id": str(product.pk),
            "product_name": product.name,
            "initial_quantity": str(quantity),
        },
    )
    return product


def insert_product(
    *,
    name: str,
    unit: str,
    quantity: Decimal,
    min_stock: Decimal,
    category: str,
    user=None,
    source: str = "",
) -> Product:
    """
    Insert a product + its seeding entrada. Call inside transaction.atomic.
    Production reuses this with min_stock=0 and source="Producción".
    """
    if Product.objects.filter(name_key=product_name_key(name)).exists():
        raise LedgerValidationError(f'Ya existe un producto llamado "{name}".')

    product = Product.objects.create(
        name=name,
        unit=unit,
        quantity=quantity,
        min_stock=min_stock,
        category=category,
    )
    append_movement(
        product=product,
        movement_type=StockMovement.MovementType.ENTRADA,
        amount=quantity,
        unit=unit,
        source=source,
        user=user,
        date=product.created_at,
    )
    product.save(update_fields=["last_sequence", "updated_at"])
    return product


def delete_product(*, product_id, capabilities=None) -> None:
    """Hard delete: the product and its whole history. No stock precondition."""
    require_capability(capabilities, CAP_INVENTORY_DELETE)

    product = get_product(product_id)
    name = product.name

    try:
        with transaction.atomic():
            product.delete()
    except DatabaseError as exc:
        raise commit_failure(exc, operation="delete_product", product_id=str(product_id)) from exc

    logger.info(
        "Product deleted",
        extra={"product_id": str(product_id), "product_name": name},
    )
