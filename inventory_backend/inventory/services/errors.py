# inventory/services/errors.py

"""
INVENTORY LEDGER ERRORS

Centralized domain errors for every stock-mutating service
(inventory, requisitions, production, assistant).

Each error carries:
- code: stable machine-readable identifier (API error payload)
- http_status: status the API layer answers with
- message: human-readable Spanish text naming the entity and quantity
"""

from __future__ import annotations

from decimal import Decimal


def format_quantity(value) -> str:
    """Render 13.500 as "13.5" and 2.000 as "2"."""
    if value is None:
        return "0"
    d = Decimal(str(value))
    if d == d.to_integral_value():
        return str(d.quantize(Decimal("1")))
    return format(d.normalize(), "f")


class LedgerError(Exception):
    """Base exception for all inventory ledger failures."""

    code = "LEDGER_ERROR"
    http_status = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class LedgerValidationError(LedgerError):
    """Malformed input: missing name, non-numeric or non-positive quantity, unknown unit."""

    code = "VALIDATION_ERROR"
    http_status = 400


class InvalidRequisitionStateError(LedgerValidationError):
    """Requisition is not pending (already completed)."""

    code = "INVALID_REQUISITION_STATE"


class InsufficientStockError(LedgerError):
    """The operation would drive a product's quantity below zero."""

    code = "INSUFFICIENT_STOCK"
    http_status = 409

    def __init__(self, product_name: str, requested, available, message: str = ""):
        self.product_name = product_name
        self.requested = Decimal(str(requested))
        self.available = Decimal(str(available))
        self.deficit = self.requested - self.available
        if not message:
            message = (
                f'Stock insuficiente para "{product_name}". '
                f"Disponible: {format_quantity(self.available)}, "
                f"solicitado: {format_quantity(self.requested)}."
            )
        super().__init__(message)


class NotFoundError(LedgerError):
    """Product, movement, requisition or raw material id does not resolve."""

    code = "NOT_FOUND"
    http_status = 404


class MovementNotReversibleError(LedgerError):
    """Movement is already cancelled or is itself a reversal record."""

    code = "MOVEMENT_NOT_REVERSIBLE"
    http_status = 409


class CommitFailureError(LedgerError):
    """The store rejected the atomic write. Re-read before retrying."""

    code = "COMMIT_FAILED"
    http_status = 503


class OperationNotPermittedError(LedgerError):
    """The caller's capability set does not include the required capability."""

    code = "OPERATION_NOT_PERMITTED"
    http_status = 403
