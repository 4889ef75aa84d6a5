from .fulfillment import FulfillmentResult, process_requisition
from .requisition_service import create_requisition

__all__ = [
    "FulfillmentResult",
    "create_requisition",
    "process_requisition",
]
