# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS
# =========================================================
# Back-office roles describe what a staff member does in the store.
# Shoppers are plain customers.
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_CUSTOMER = "customer"

ROLE_CHOICES = [
    (ROLE_ADMIN, "Admin"),
    (ROLE_MANAGER, "Manager"),
    (ROLE_CUSTOMER, "Customer"),
]

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_MANAGER,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_ORDERS_VIEW = "orders.view"
CAP_ORDERS_MANAGE = "orders.manage"  # status override, tracking, carrier

CAP_CATALOG_EDIT = "catalog.edit"

CAP_SHIPPING_MANAGE = "shipping.manage"  # carriers + label formats
CAP_SETTINGS_MANAGE = "settings.manage"  # store settings, gateway credentials

CAP_CUSTOMERS_VIEW = "customers.view"
CAP_REPORTS_VIEW = "reports.view"

ALL_CAPABILITIES = {
    CAP_ORDERS_VIEW,
    CAP_ORDERS_MANAGE,
    CAP_CATALOG_EDIT,
    CAP_SHIPPING_MANAGE,
    CAP_SETTINGS_MANAGE,
    CAP_CUSTOMERS_VIEW,
    CAP_REPORTS_VIEW,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        CAP_ORDERS_VIEW,
        CAP_ORDERS_MANAGE,
        CAP_CATALOG_EDIT,
        CAP_SHIPPING_MANAGE,
        CAP_CUSTOMERS_VIEW,
        CAP_REPORTS_VIEW,
        # gateway credentials stay admin-only
    },
    ROLE_CUSTOMER: set(),
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def capabilities_for(user) -> set[str]:
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def is_staff_user(user) -> bool:
    return bool(user and user.is_authenticated and get_user_role(user) in STAFF_ROLES)


# =========================================================
# Base Role Permission
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Subclasses define allowed_roles.
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        user_role = get_user_role(user)
        if not user_role:
            return False

        return user_role in self.allowed_roles


# =========================================================
# Capability Permission
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        required_capability = CAP_ORDERS_MANAGE

    Views may override get_required_capability() to vary it per action.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        resolver = getattr(view, "get_required_capability", None)
        required = resolver() if callable(resolver) else getattr(view, "required_capability", None)
        if not required:
            # deny by default
            return False

        return required in capabilities_for(user)


# =========================================================
# Role Permissions
# =========================================================
class IsAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN}


class IsStaff(BaseRolePermission):
    allowed_roles = STAFF_ROLES
