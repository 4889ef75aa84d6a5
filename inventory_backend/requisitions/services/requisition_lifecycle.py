"""
REQUISITION LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Requisition entities.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
- Single source of truth
"""

from inventory.services.errors import InvalidRequisitionStateError
from requisitions.models import Requisition

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Requisition.Status.COMPLETED,
}

ALLOWED_TRANSITIONS = {
    Requisition.Status.PENDING: {
        Requisition.Status.COMPLETED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, requisition: Requisition, target_status: str):
    if not can_transition(
        from_status=requisition.status,
        to_status=target_status,
    ):
        if requisition.status == Requisition.Status.COMPLETED:
            raise InvalidRequisitionStateError(
                "Esta requisición ya fue procesada."
            )
        raise InvalidRequisitionStateError(
            f"La requisición no puede pasar de '{requisition.status}' "
            f"a '{target_status}'."
        )
