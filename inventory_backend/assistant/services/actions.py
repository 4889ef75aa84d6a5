# assistant/services/actions.py

"""
ASSISTANT ACTION DISPATCHER

The natural-language assistant runs outside this service. Once the user
confirms one of its proposed tool calls, the client posts
{"name": ..., "args": {...}} here and it is executed through the same
services the UI uses (same capability checks, same ledger rules).

Supported actions:
- add_stock           {productName, quantity, unit}
- remove_stock        {productName, quantity, unit, destination?}
- create_invoice      {provider, invoiceNumber, totalAmount, items[]}
- create_requisition  {department, items[{productName, quantity, unit}]}

Arguments are accepted in camelCase (as the assistant emits them) or
snake_case.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from inventory.services import find_product_by_name, quick_update
from inventory.services.errors import (
    InsufficientStockError,
    LedgerValidationError,
    NotFoundError,
    format_quantity,
)
from inventory.services.ledger import (
    normalize_name,
    require_capability,
    safe_log_extra,
    to_positive_decimal,
)
from permissions.roles import CAP_ASSISTANT_USE
from purchases.models import Invoice
from purchases.services import create_invoice
from requisitions.services import create_requisition

logger = logging.getLogger(__name__)

ADD_STOCK_TAG = "chatbot_entrada"
REMOVE_STOCK_TAG = "salida_chatbot"


class UnknownActionError(LedgerValidationError):
    code = "UNKNOWN_ACTION"


@dataclass(frozen=True)
class ActionResult:
    action: str
    message: str
    data: dict = field(default_factory=dict)


def _arg(args: dict, camel: str, snake: str, default=None):
    if camel in args:
        return args[camel]
    return args.get(snake, default)


def _product_by_name(args: dict):
    name = normalize_name(_arg(args, "productName", "product_name"))
    product = find_product_by_name(name)
    if product is None:
        raise NotFoundError(f'Producto "{name}" no encontrado.')
    return product


# ======================================================
# HANDLERS
# ======================================================

def _add_stock(args, *, user, capabilities) -> ActionResult:
    product = _product_by_name(args)
    quantity = to_positive_decimal(args.get("quantity"))
    unit = str(args.get("unit") or product.unit).strip()

    result = quick_update(
        product_id=product.pk,
        amount=quantity,
        unit=unit,
        tag=ADD_STOCK_TAG,
        user=user,
        capabilities=capabilities,
    )
    return ActionResult(
        action="add_stock",
        message=f"Entrada registrada: {format_quantity(quantity)} {unit} de {product.name}.",
        data={"product_id": str(product.pk), "movement_id": str(result.movement.pk)},
    )


def _remove_stock(args, *, user, capabilities) -> ActionResult:
    product = _product_by_name(args)
    quantity = to_positive_decimal(args.get("quantity"))
    unit = str(args.get("unit") or product.unit).strip()
    destination = str(args.get("destination") or "").strip() or REMOVE_STOCK_TAG

    try:
        result = quick_update(
            product_id=product.pk,
            amount=-quantity,
            unit=unit,
            tag=destination,
            user=user,
            capabilities=capabilities,
        )
    except InsufficientStockError as exc:
        raise InsufficientStockError(
            product_name=exc.product_name,
            requested=exc.requested,
            available=exc.available,
            message=(
                f'Stock insuficiente para "{exc.product_name}". '
                f"Quedan {format_quantity(exc.available)}."
            ),
        ) from exc

    return ActionResult(
        action="remove_stock",
        message=f"Salida registrada: {format_quantity(quantity)} {unit} de {product.name}.",
        data={"product_id": str(product.pk), "movement_id": str(result.movement.pk)},
    )


def _create_invoice(args, *, user, capabilities) -> ActionResult:
    items = [
        {
            "product_name": _arg(item, "productName", "product_name"),
            "quantity": item.get("quantity"),
            "unit": item.get("unit", ""),
            "price": item.get("price", 0),
        }
        for item in (args.get("items") or [])
    ]
    number = _arg(args, "invoiceNumber", "invoice_number")
    provider = args.get("provider")

    result = create_invoice(
        invoice_number=number,
        provider=provider,
        total_amount=_arg(args, "totalAmount", "total_amount"),
        items=items,
        status=Invoice.STATUS_PENDING,
        source=Invoice.SOURCE_ASSISTANT,
        user=user,
        capabilities=capabilities,
    )
    invoice = result.invoice
    return ActionResult(
        action="create_invoice",
        message=f"Factura #{invoice.invoice_number} para {invoice.provider} creada.",
        data={"invoice_id": str(invoice.pk)},
    )


def _create_requisition(args, *, user, capabilities) -> ActionResult:
    items = [
        {
            "product_name": _arg(item, "productName", "product_name"),
            "quantity": item.get("quantity"),
            "unit": item.get("unit", ""),
        }
        for item in (args.get("items") or [])
    ]

    requisition = create_requisition(
        department=args.get("department"),
        items=items,
        user=user,
        capabilities=capabilities,
    )
    return ActionResult(
        action="create_requisition",
        message=f"Requisición para {requisition.department} creada.",
        data={"requisition_id": str(requisition.pk)},
    )


ACTION_HANDLERS = {
    "add_stock": _add_stock,
    "remove_stock": _remove_stock,
    "create_invoice": _create_invoice,
    "create_requisition": _create_requisition,
}


# ======================================================
# PUBLIC ENTRY POINT
# ======================================================

def execute_action(*, name, args=None, user=None, capabilities=None) -> ActionResult:
    require_capability(capabilities, CAP_ASSISTANT_USE)

    handler = ACTION_HANDLERS.get(str(name or "").strip())
    if handler is None:
        raise UnknownActionError(f'Acción "{name}" desconocida o no implementada.')

    result = handler(args or {}, user=user, capabilities=capabilities)

    logger.info(
        "Assistant action executed",
        extra=safe_log_extra(
            action=result.action,
            user_id=str(getattr(user, "pk", "") or ""),
            **result.data,
        ),
    )
    return result
