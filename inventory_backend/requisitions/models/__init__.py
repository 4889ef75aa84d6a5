from .requisition import Requisition, RequisitionItem

__all__ = [
    "Requisition",
    "RequisitionItem",
]
