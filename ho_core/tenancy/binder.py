# ho_core/tenancy/binder.py
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, connections
from rest_framework.exceptions import PermissionDenied

from ho_core.tenancy import gateway
from ho_core.tenancy.context import (
    TenantContext,
    attach_context,
    get_context,
)
from ho_core.tenancy.identity import resolve_identity

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_HEADER = "X-Branch-Id"

BRANCH_DENIED_MSG = "Access denied to this branch"
BRANCH_REQUIRED_MSG = "Branch selection required. Set X-Branch-Id header."


def _branch_header_name() -> str:
    return getattr(settings, "TENANCY_BRANCH_HEADER", DEFAULT_BRANCH_HEADER)


def _get_header(request, name: str) -> Optional[str]:
    """
    request.headers is case-insensitive; fallback to META for RequestFactory-built requests.
    """
    headers = getattr(request, "headers", None)
    v = headers.get(name) if headers is not None else None
    if v:
        return v
    meta_key = "HTTP_" + name.upper().replace("-", "_")
    return request.META.get(meta_key)


def _normalize_branch_id(raw: str) -> str:
    try:
        return str(UUID(raw))
    except ValueError:
        return raw


def requested_branch_id(request) -> Optional[str]:
    raw = (_get_header(request, _branch_header_name()) or "").strip()
    if not raw:
        return None
    return _normalize_branch_id(raw)


def bind(request, *, using: str = DEFAULT_DB_ALIAS) -> TenantContext:
    """
    Derives the request's TenantContext and attaches it to the request.

    Branch selection, in order:
      1) explicit branch header -> must be one of the caller's branches, else 403
      2) exactly one accessible branch -> auto-selected
      3) otherwise branch left unset (see require_branch)

    When the request already runs inside a transaction on `using` (ATOMIC_REQUESTS),
    the context is applied to it right away. Outside a transaction the pooled
    connection is left untouched; run_scoped applies the context to its own transaction.
    """
    attach_context(request, None)

    identity = resolve_identity(request)
    requested = requested_branch_id(request)

    if requested is not None:
        if not identity.can_access(requested):
            logger.warning(
                "Branch access denied user=%s tenant=%s branch=%s",
                identity.user_id,
                identity.tenant_id,
                requested,
            )
            raise PermissionDenied(BRANCH_DENIED_MSG)
        branch_id = requested
    elif len(identity.branch_ids) == 1:
        (branch_id,) = identity.branch_ids
    else:
        branch_id = None

    context = TenantContext(
        tenant_id=identity.tenant_id,
        branch_id=branch_id,
        user_id=identity.user_id,
    )

    connection = connections[using]
    if connection.in_atomic_block:
        gateway.configure_session(connection, context)

    attach_context(request, context)
    return context


def require_branch(request) -> TenantContext:
    """
    Guard for handlers that need a concrete branch (bed/room assignment, queues...).
    bind() itself tolerates an unset branch.
    """
    context = get_context(request)
    if context.branch_id is None:
        raise PermissionDenied(BRANCH_REQUIRED_MSG)
    return context
