# ho_core/iam/permissions.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import SAFE_METHODS, BasePermission

from ho_core.iam.models import StaffRole
from ho_core.iam.services.membership import active_staff_profile
from ho_core.iam.tokens import ROLE_CLAIM

ALL_ROLES = frozenset(StaffRole.values)
ADMIN_ROLES = frozenset({StaffRole.SUPER_ADMIN.value, StaffRole.BRANCH_ADMIN.value})
SUPER_ADMIN_ONLY = frozenset({StaffRole.SUPER_ADMIN.value})


def staff_role(request) -> Optional[str]:
    """
    Role from the access token claim, else from the staff profile.
    None for users that are not staff.
    """
    user = getattr(request, "user", None)
    if not user or not getattr(user, "is_authenticated", False):
        return None

    token = getattr(request, "auth", None)
    if token is not None and hasattr(token, "get"):
        role = token.get(ROLE_CLAIM)
        if role:
            return str(role)

    profile = active_staff_profile(user.pk)
    return profile.role if profile else None


class BaseRolePermission(BasePermission):
    """
    Role-based access per view action.

    - super_admin may do everything.
    - Unknown action on a SAFE request falls back to list/retrieve.
    - Unknown action otherwise -> deny.
    """
    message = "You do not have permission to perform this action."

    # Override in subclasses: dict of action -> set of allowed roles
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "create": ADMIN_ROLES,
        "update": ADMIN_ROLES,
        "partial_update": ADMIN_ROLES,
        "destroy": SUPER_ADMIN_ONLY,
    }

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        role = staff_role(request)
        if role is None:
            return False

        if role == StaffRole.SUPER_ADMIN.value:
            return True

        action = self._infer_action(request, view)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            read_action = "retrieve" if ("pk" in kwargs or "id" in kwargs) else "list"
            allowed = self.allowed_roles_per_action.get(read_action)

        if allowed is not None:
            return role in allowed

        return False


class BranchPermission(BaseRolePermission):
    """Permissions for branch management"""
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "current": ALL_ROLES,
        "partial_update": ADMIN_ROLES,
        "update": ADMIN_ROLES,
        "create": SUPER_ADMIN_ONLY,
        "destroy": SUPER_ADMIN_ONLY,
    }


class TenantPermission(BaseRolePermission):
    """Current tenant: admins read, super admins write"""
    allowed_roles_per_action = {
        "list": ADMIN_ROLES,
        "retrieve": ADMIN_ROLES,
        "partial_update": SUPER_ADMIN_ONLY,
    }


class AuditLogPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": ADMIN_ROLES,
    }


class StaffAssignmentPermission(BaseRolePermission):
    """Maintaining which branches a staff member may act within"""
    allowed_roles_per_action = {
        "create": ADMIN_ROLES,
        "destroy": ADMIN_ROLES,
    }
