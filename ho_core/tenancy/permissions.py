# ho_core/tenancy/permissions.py
from __future__ import annotations

from rest_framework.permissions import BasePermission

from ho_core.tenancy.binder import bind, require_branch


class HasTenantContext(BasePermission):
    """
    Binds the tenant context once per request, after authentication and before
    the handler runs. Failures raise (401/403) instead of returning False so the
    client sees the specific reason.
    """

    def has_permission(self, request, view) -> bool:
        bind(request)
        return True


class HasBranchContext(HasTenantContext):
    """
    Same as HasTenantContext, and the request must end up with a concrete branch.
    Use instead of (not together with) HasTenantContext.
    """

    def has_permission(self, request, view) -> bool:
        super().has_permission(request, view)
        require_branch(request)
        return True
