# permissions/roles.py

from __future__ import annotations

from typing import Iterable, Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
# jefe: owner/manager, full access including settings
# inventario: inventory controller, everything except settings
# almacenista: storekeeper, day-to-day movements only
ROLE_JEFE = "jefe"
ROLE_INVENTARIO = "inventario"
ROLE_ALMACENISTA = "almacenista"

STAFF_ROLES = {
    ROLE_JEFE,
    ROLE_INVENTARIO,
    ROLE_ALMACENISTA,
}

# Unknown or missing roles fall back to the most restrictive one.
DEFAULT_ROLE = ROLE_ALMACENISTA


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
# Services receive the capability set explicitly.
CAP_SETTINGS_MANAGE = "settings.manage"

CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_EDIT = "inventory.edit"          # create products, register salidas
CAP_INVENTORY_DELETE = "inventory.delete"
CAP_INVENTORY_ADJUST = "inventory.adjust"      # manual entradas + reversals
CAP_INVENTORY_HISTORY = "inventory.history"    # full movement history

CAP_REQUISITIONS_PROCESS = "requisitions.process"
CAP_PRODUCTION_CREATE = "production.create"
CAP_PURCHASES_MANAGE = "purchases.manage"
CAP_ASSISTANT_USE = "assistant.use"

ALL_CAPABILITIES = {
    CAP_SETTINGS_MANAGE,
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_DELETE,
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_HISTORY,
    CAP_REQUISITIONS_PROCESS,
    CAP_PRODUCTION_CREATE,
    CAP_PURCHASES_MANAGE,
    CAP_ASSISTANT_USE,
}


# =========================================================
# ROLE → CAPABILITY MAP (DEFAULT)
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_JEFE: {
        *ALL_CAPABILITIES,
    },
    ROLE_INVENTARIO: ALL_CAPABILITIES - {CAP_SETTINGS_MANAGE},
    ROLE_ALMACENISTA: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_REQUISITIONS_PROCESS,
        CAP_PRODUCTION_CREATE,
        CAP_PURCHASES_MANAGE,
        CAP_ASSISTANT_USE,
        # deliberately NOT delete / adjust / full history
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    role = getattr(user, "role", None)
    if role in STAFF_ROLES:
        return role
    return DEFAULT_ROLE


def capabilities_for_role(role: Optional[str]) -> set[str]:
    return set(ROLE_CAPABILITIES.get(role or DEFAULT_ROLE, ROLE_CAPABILITIES[DEFAULT_ROLE]))


def effective_capabilities_for(request, user) -> set[str]:
    """
    Compute capabilities from role.
    Superusers always get everything.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return set()
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)
    return capabilities_for_role(get_user_role(user))


def has_capability(capabilities: Optional[Iterable[str]], capability: str) -> bool:
    """
    capabilities=None means a trusted in-process caller
    (management commands, tests) and is always allowed.
    """
    if capabilities is None:
        return True
    return capability in set(capabilities)


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_INVENTORY_ADJUST
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # If not set, deny-by-default to avoid accidental open endpoints
            return False

        caps = effective_capabilities_for(request, user)
        return required in caps


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a list.

    Usage:
        view.required_any_capabilities = {CAP_INVENTORY_EDIT, CAP_INVENTORY_ADJUST}
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        caps = effective_capabilities_for(request, user)
        return any(cap in caps for cap in set(required))

