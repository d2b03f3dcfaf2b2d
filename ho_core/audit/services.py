# ho_core/audit/services.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.db import DatabaseError, transaction

from ho_core.audit.models import AuditEvent
from ho_core.tenancy.gateway import ScopedTransaction

logger = logging.getLogger(__name__)


class AuditAction:
    USER_BRANCHES_ASSIGN = "user.branches_assign"
    USER_BRANCH_REMOVE = "user.branch_remove"

    BRANCH_CREATE = "branch.create"
    BRANCH_UPDATE = "branch.update"
    BRANCH_DELETE = "branch.delete"
    BRANCH_ACTIVATE = "branch.activate"
    BRANCH_DEACTIVATE = "branch.deactivate"

    TENANT_UPDATE = "tenant.update"


class EntityType:
    USER = "user"
    BRANCH = "branch"
    TENANT = "tenant"


def changed_fields(old: Dict[str, Any], new: Dict[str, Any]) -> tuple[Dict[str, Any], Dict[str, Any]]:
    """
    (old_values, new_values) restricted to keys of `new` whose value differs.
    """
    old_values: Dict[str, Any] = {}
    new_values: Dict[str, Any] = {}
    for key, value in new.items():
        if old.get(key) != value:
            old_values[key] = old.get(key)
            new_values[key] = value
    return old_values, new_values


def _client_ip(request) -> Optional[str]:
    if request is None:
        return None
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.META.get("REMOTE_ADDR") or None


def record_audit(
    tx: ScopedTransaction,
    *,
    action: str,
    entity_type: str,
    entity_id: Any = None,
    old_values: Optional[Dict[str, Any]] = None,
    new_values: Optional[Dict[str, Any]] = None,
    request=None,
) -> Optional[AuditEvent]:
    """
    Writes an audit event for the scoped transaction's tenant/branch/user.

    Runs in a savepoint: a failed audit write is logged and rolled back on its own
    and never aborts the caller's unit of work. Returns None in that case.
    """
    ctx = tx.context
    try:
        with transaction.atomic(using=tx.using):
            return AuditEvent.objects.using(tx.using).create(
                tenant_id=ctx.tenant_id,
                branch_id=ctx.branch_id,
                actor_user_id=ctx.user_id,
                action=action,
                entity_type=entity_type,
                entity_id="" if entity_id is None else str(entity_id),
                old_values=old_values,
                new_values=new_values,
                ip_address=_client_ip(request),
                user_agent=(request.META.get("HTTP_USER_AGENT", "") if request is not None else "")[:512],
                request_id=getattr(request, "request_id", "") or "",
            )
    except (DatabaseError, TypeError, ValueError):
        logger.exception(
            "Failed to write audit event action=%s entity=%s:%s tenant=%s",
            action,
            entity_type,
            entity_id,
            ctx.tenant_id,
        )
        return None
