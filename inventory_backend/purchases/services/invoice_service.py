# purchases/services/invoice_service.py

"""
SUPPLIER INVOICES

- invoices are records only; stock is never touched here
- total_amount defaults to the sum of the lines when not given
- status is pending | paid and may be toggled freely
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from inventory.services import clock
from inventory.services.errors import LedgerValidationError, NotFoundError
from inventory.services.ledger import (
    ZERO,
    commit_failure,
    normalize_name,
    require_capability,
    to_decimal,
)
from permissions.roles import CAP_PURCHASES_MANAGE
from purchases.models import Invoice, InvoiceItem

logger = logging.getLogger(__name__)

VALID_STATUSES = {Invoice.STATUS_PENDING, Invoice.STATUS_PAID}
VALID_SOURCES = {Invoice.SOURCE_MANUAL, Invoice.SOURCE_WHATSAPP, Invoice.SOURCE_ASSISTANT}


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class InvoiceResult:
    invoice: Invoice
    message: str


def _non_negative(value, *, field_name: str) -> Decimal:
    d = to_decimal(value, field_name=field_name)
    if d < ZERO:
        raise LedgerValidationError(f"El valor de {field_name} no puede ser negativo.")
    return d


def _parse_items(items) -> list[InvoiceItem]:
    lines = []
    for position, raw in enumerate(items or []):
        name = normalize_name(raw.get("product_name") or raw.get("productName"))
        if not name:
            raise LedgerValidationError("Cada línea de la factura necesita un producto.")
        lines.append(
            InvoiceItem(
                product_name=name,
                quantity=_non_negative(raw.get("quantity"), field_name=f"cantidad de {name}"),
                unit=str(raw.get("unit") or "").strip(),
                price=_money(_non_negative(raw.get("price", 0), field_name=f"precio de {name}")),
                position=position,
            )
        )
    return lines


def create_invoice(
    *,
    invoice_number,
    provider,
    total_amount=None,
    items=None,
    status: str = Invoice.STATUS_PENDING,
    source: str = Invoice.SOURCE_MANUAL,
    raw_text: str = "",
    date=None,
    user=None,
    capabilities=None,
) -> InvoiceResult:
    require_capability(capabilities, CAP_PURCHASES_MANAGE)

    number = str(invoice_number or "").strip()
    if not number:
        raise LedgerValidationError("El número de factura es obligatorio.")
    provider_name = normalize_name(provider)
    if not provider_name:
        raise LedgerValidationError("El proveedor es obligatorio.")
    if status not in VALID_STATUSES:
        raise LedgerValidationError(f"Estado de factura inválido: {status}")
    if source not in VALID_SOURCES:
        raise LedgerValidationError(f"Origen de factura inválido: {source}")

    lines = _parse_items(items)

    if total_amount in (None, ""):
        total = _money(sum((line.line_total for line in lines), Decimal("0.00")))
    else:
        total = _money(_non_negative(total_amount, field_name="monto total"))

    try:
        with transaction.atomic():
            invoice = Invoice.objects.create(
                invoice_number=number,
                provider=provider_name,
                date=date or clock.now(),
                total_amount=total,
                status=status,
                source=source,
                raw_text=str(raw_text or ""),
                created_by=user if getattr(user, "is_authenticated", False) else None,
            )
            for line in lines:
                line.invoice = invoice
            InvoiceItem.objects.bulk_create(lines)
    except ValidationError as exc:
        raise LedgerValidationError("; ".join(exc.messages)) from exc
    except DatabaseError as exc:
        raise commit_failure(exc, operation="create_invoice", invoice_number=number) from exc

    logger.info(
        "Invoice created",
        extra={
            "invoice_id": str(invoice.pk),
            "invoice_number": number,
            "provider": provider_name,
            "total_amount": str(total),
            "source": source,
        },
    )
    return InvoiceResult(
        invoice=invoice,
        message=f"Factura #{number} guardada con éxito.",
    )


def update_invoice_status(*, invoice_id, status: str, capabilities=None) -> InvoiceResult:
    require_capability(capabilities, CAP_PURCHASES_MANAGE)

    if status not in VALID_STATUSES:
        raise LedgerValidationError(f"Estado de factura inválido: {status}")

    try:
        with transaction.atomic():
            try:
                invoice = Invoice.objects.select_for_update().get(pk=invoice_id)
            except (Invoice.DoesNotExist, ValidationError, ValueError, TypeError):
                raise NotFoundError(f"Factura no encontrada: {invoice_id}")

            previous = invoice.status
            invoice.status = status
            invoice.save(update_fields=["status"])
    except DatabaseError as exc:
        raise commit_failure(exc, operation="update_invoice_status", invoice_id=str(invoice_id)) from exc

    logger.info(
        "Invoice status updated",
        extra={"invoice_id": str(invoice.pk), "from": previous, "to": status},
    )
    return InvoiceResult(invoice=invoice, message="Estado de la factura actualizado.")
