# ho_core/tenants/services.py
from __future__ import annotations

from typing import Any, Dict

from ho_core.audit.services import AuditAction, EntityType, changed_fields, record_audit
from ho_core.tenancy.gateway import ScopedTransaction
from ho_core.tenants.models import Tenant


def current_tenant(tx: ScopedTransaction) -> Tenant:
    return Tenant.objects.get(id=tx.context.tenant_id)


def update_current_tenant(tx: ScopedTransaction, patch: Dict[str, Any], *, request=None) -> Tenant:
    tenant = Tenant.objects.select_for_update().get(id=tx.context.tenant_id)

    old_values, new_values = changed_fields({field: getattr(tenant, field) for field in patch}, patch)
    if not new_values:
        return tenant

    for field, value in new_values.items():
        setattr(tenant, field, value)
    tenant.save(update_fields=[*new_values.keys(), "updated_at"])

    record_audit(
        tx,
        action=AuditAction.TENANT_UPDATE,
        entity_type=EntityType.TENANT,
        entity_id=tenant.id,
        old_values=old_values,
        new_values=new_values,
        request=request,
    )
    return tenant
