from .adjustments import AdjustmentResult, quick_update
from .ledger import (
    MovementResult,
    apply_signed_movement,
    create_product,
    delete_product,
    find_product_by_name,
    get_product,
)
from .reversal import ReversalResult, cancel_movement

__all__ = [
    "AdjustmentResult",
    "MovementResult",
    "ReversalResult",
    "apply_signed_movement",
    "cancel_movement",
    "create_product",
    "delete_product",
    "find_product_by_name",
    "get_product",
    "quick_update",
]
