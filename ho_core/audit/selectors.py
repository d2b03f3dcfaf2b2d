# ho_core/audit/selectors.py
from __future__ import annotations

from datetime import datetime

from django.db.models import Q, QuerySet

from ho_core.audit.models import AuditEvent
from ho_core.tenancy.context import TenantContext


def list_audit_events(
    *,
    context: TenantContext,
    entity_type: str | None = None,
    entity_id: str | None = None,
    action: str | None = None,
    actor_user_id: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> QuerySet[AuditEvent]:
    """
    Audit events visible to `context`: its tenant, and when a branch is bound,
    only that branch's events plus tenant-wide ones (same rule as the
    PostgreSQL select policy).
    """
    qs = AuditEvent.objects.filter(tenant_id=context.tenant_id)
    if context.branch_id is not None:
        qs = qs.filter(Q(branch_id__isnull=True) | Q(branch_id=context.branch_id))

    if entity_type:
        qs = qs.filter(entity_type=entity_type)
    if entity_id:
        qs = qs.filter(entity_id=entity_id)
    if action:
        qs = qs.filter(action=action)
    if actor_user_id:
        qs = qs.filter(actor_user_id=actor_user_id)
    if start is not None:
        qs = qs.filter(created_at__gte=start)
    if end is not None:
        qs = qs.filter(created_at__lte=end)

    return qs.order_by("-created_at")
