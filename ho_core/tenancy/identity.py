# ho_core/tenancy/identity.py
from __future__ import annotations

from rest_framework.exceptions import NotAuthenticated

from ho_core.iam.services.membership import identity_for_user
from ho_core.iam.tokens import BRANCHES_CLAIM, TENANT_CLAIM
from ho_core.tenancy.context import Identity

AUTH_REQUIRED_MSG = "Authentication required"
NO_TENANT_MSG = "Authenticated user is not an active staff member of any tenant."


def _claims_identity(user, token) -> Identity | None:
    """
    Identity from staff access token claims, if the request carries one.
    """
    if token is None or not hasattr(token, "get"):
        return None

    tenant_id = token.get(TENANT_CLAIM)
    if not tenant_id:
        return None

    branch_ids = token.get(BRANCHES_CLAIM) or []
    if isinstance(branch_ids, str):
        branch_ids = [branch_ids]

    return Identity.build(user_id=user.pk, tenant_id=tenant_id, branch_ids=branch_ids)


def resolve_identity(request) -> Identity:
    """
    Returns the caller's {user_id, tenant_id, branch_ids}.

    - Unauthenticated -> NotAuthenticated.
    - Token claims win when present (JWT requests).
    - Otherwise falls back to the membership graph (session/forced auth).
    - No staff profile -> NotAuthenticated: without a tenant nothing can be scoped.
    """
    user = getattr(request, "user", None)
    if not user or not getattr(user, "is_authenticated", False):
        raise NotAuthenticated(AUTH_REQUIRED_MSG)

    identity = _claims_identity(user, getattr(request, "auth", None))
    if identity is not None:
        return identity

    identity = identity_for_user(user.pk)
    if identity is None:
        raise NotAuthenticated(NO_TENANT_MSG)
    return identity
