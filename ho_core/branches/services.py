# ho_core/branches/services.py
from __future__ import annotations

from typing import Any, Dict

from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from ho_core.audit.services import AuditAction, EntityType, changed_fields, record_audit
from ho_core.branches.models import Branch
from ho_core.branches.selectors import branches_for_tenant, count_branches, is_code_available
from ho_core.common.api.exceptions import BadRequest
from ho_core.tenancy.gateway import ScopedTransaction
from ho_core.tenants.models import SubscriptionPlan, Tenant

BRANCH_NOT_FOUND_MSG = "Branch not found in this tenant."
CODE_TAKEN_MSG = "Branch code already exists"
LAST_BRANCH_MSG = "Cannot delete the last branch"

PLAN_BRANCH_LIMITS = {
    SubscriptionPlan.TRIAL.value: 2,
    SubscriptionPlan.BASIC.value: 3,
    SubscriptionPlan.PROFESSIONAL.value: 10,
    SubscriptionPlan.ENTERPRISE.value: 100,
}


def _branch_for_update(tx: ScopedTransaction, branch_id: str) -> Branch:
    try:
        return branches_for_tenant(tenant_id=tx.context.tenant_id).select_for_update().get(id=branch_id)
    except Branch.DoesNotExist:
        raise NotFound(BRANCH_NOT_FOUND_MSG)


def create_branch(tx: ScopedTransaction, data: Dict[str, Any], *, request=None) -> Branch:
    """
    Creates a branch in the scope's tenant, within the subscription plan's limit.
    """
    tenant_id = tx.context.tenant_id
    plan = Tenant.objects.values_list("subscription_plan", flat=True).get(id=tenant_id)
    limit = PLAN_BRANCH_LIMITS.get(plan, PLAN_BRANCH_LIMITS[SubscriptionPlan.TRIAL.value])

    if count_branches(tenant_id=tenant_id) >= limit:
        raise PermissionDenied(f"Branch limit reached. Your {plan} plan allows {limit} branches.")

    if not is_code_available(tenant_id=tenant_id, code=data["code"]):
        raise ValidationError({"code": CODE_TAKEN_MSG})

    branch = Branch.objects.create(tenant_id=tenant_id, **data)

    record_audit(
        tx,
        action=AuditAction.BRANCH_CREATE,
        entity_type=EntityType.BRANCH,
        entity_id=branch.id,
        new_values={"name": branch.name, "code": branch.code},
        request=request,
    )
    return branch


def update_branch(tx: ScopedTransaction, branch_id: str, patch: Dict[str, Any], *, request=None) -> Branch:
    branch = _branch_for_update(tx, branch_id)

    before = {field: getattr(branch, field) for field in patch}
    old_values, new_values = changed_fields(before, patch)
    if not new_values:
        return branch

    for field, value in new_values.items():
        setattr(branch, field, value)
    branch.save(update_fields=[*new_values.keys(), "updated_at"])

    action = AuditAction.BRANCH_UPDATE
    if "is_active" in new_values:
        action = AuditAction.BRANCH_ACTIVATE if branch.is_active else AuditAction.BRANCH_DEACTIVATE

    record_audit(
        tx,
        action=action,
        entity_type=EntityType.BRANCH,
        entity_id=branch.id,
        old_values=old_values,
        new_values=new_values,
        request=request,
    )
    return branch


def delete_branch(tx: ScopedTransaction, branch_id: str, *, request=None) -> None:
    """
    Soft delete: the row stays (audit history points at it) but is deactivated
    and hidden from every branch query.
    """
    branch = _branch_for_update(tx, branch_id)

    if count_branches(tenant_id=tx.context.tenant_id) <= 1:
        raise BadRequest(LAST_BRANCH_MSG)

    branch.is_active = False
    branch.deleted_at = timezone.now()
    branch.save(update_fields=["is_active", "deleted_at", "updated_at"])

    record_audit(
        tx,
        action=AuditAction.BRANCH_DELETE,
        entity_type=EntityType.BRANCH,
        entity_id=branch.id,
        old_values={"is_active": True},
        new_values={"is_active": False},
        request=request,
    )
