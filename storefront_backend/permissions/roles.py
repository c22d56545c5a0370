# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS
# =========================================================
# Mirrors users.User.ROLE_* (kept here so views never import the user model).
ROLE_CUSTOMER = "customer"
ROLE_PRO = "pro"
ROLE_ADMIN = "admin"

ALL_ROLES = {ROLE_CUSTOMER, ROLE_PRO, ROLE_ADMIN}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views should protect capabilities, not raw roles.
CAP_ORDERS_MANAGE = "orders.manage"          # back-office transitions, payment status
CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_ADJUST = "inventory.adjust"    # manual in/out/adjustment movements
CAP_QUOTES_MANAGE = "quotes.manage"          # edit, send, convert quotes
CAP_QUOTES_REQUEST = "quotes.request"        # B2B customers asking for a quote

ALL_CAPABILITIES = {
    CAP_ORDERS_MANAGE,
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_ADJUST,
    CAP_QUOTES_MANAGE,
    CAP_QUOTES_REQUEST,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        CAP_ORDERS_MANAGE,
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_ADJUST,
        CAP_QUOTES_MANAGE,
    },
    ROLE_PRO: {
        CAP_QUOTES_REQUEST,
    },
    ROLE_CUSTOMER: set(),
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def effective_capabilities_for(user) -> set[str]:
    """
    Capabilities granted by the user's role.

    Superusers are treated as admins whatever their stored role.
    """
    if getattr(user, "is_superuser", False):
        return set(ROLE_CAPABILITIES[ROLE_ADMIN])

    caps = set(ROLE_CAPABILITIES.get(get_user_role(user), set()))

    # pro accounts only gain their capabilities once validated by an admin
    if get_user_role(user) == ROLE_PRO and not getattr(user, "is_validated", False):
        caps.discard(CAP_QUOTES_REQUEST)

    return caps


def user_has_capability(user, capability: str) -> bool:
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return capability in effective_capabilities_for(user)


# =========================================================
# Base Role Permission (Internal Use)
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Base permission for role-based access control.

    Subclasses must define:
    - allowed_roles (set)
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        if getattr(user, "is_superuser", False) and ROLE_ADMIN in self.allowed_roles:
            return True

        user_role = get_user_role(user)
        if not user_role:
            return False

        return user_role in self.allowed_roles


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_ORDERS_MANAGE
    """

    def has_permission(self, request, view):
        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default to avoid accidental open endpoints
            return False

        return user_has_capability(request.user, required)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a list.

    Usage:
        view.required_any_capabilities = {CAP_INVENTORY_VIEW, CAP_INVENTORY_ADJUST}
    """

    def has_permission(self, request, view):
        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        return any(user_has_capability(request.user, cap) for cap in set(required))


class IsAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN}


class IsPro(BaseRolePermission):
    allowed_roles = {ROLE_PRO}
