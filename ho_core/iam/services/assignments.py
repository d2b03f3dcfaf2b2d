# ho_core/iam/services/assignments.py
from __future__ import annotations

from typing import Iterable, Optional

from rest_framework.exceptions import NotFound, ValidationError

from ho_core.audit.services import AuditAction, EntityType, record_audit
from ho_core.branches.selectors import branches_for_tenant
from ho_core.common.api.exceptions import BadRequest
from ho_core.iam.models import BranchAssignment, StaffProfile
from ho_core.tenancy.gateway import ScopedTransaction

USER_NOT_FOUND_MSG = "User not found"
ASSIGNMENT_NOT_FOUND_MSG = "Branch assignment not found"
LAST_ASSIGNMENT_MSG = "Cannot remove last branch assignment"


def _staff_profile(tx: ScopedTransaction, user_id) -> StaffProfile:
    # iam tables are not row-level secured: filter by tenant explicitly.
    profile = StaffProfile.objects.filter(user_id=user_id, tenant_id=tx.context.tenant_id).first()
    if profile is None:
        raise NotFound(USER_NOT_FOUND_MSG)
    return profile


def _assigned_branch_ids(profile: StaffProfile) -> list[str]:
    return [str(b) for b in profile.branch_assignments.order_by("branch_id").values_list("branch_id", flat=True)]


def assign_branches(
    tx: ScopedTransaction,
    user_id,
    branch_ids: Iterable[str],
    *,
    primary_branch_id: Optional[str] = None,
    request=None,
) -> list[str]:
    """
    Replaces the staff member's branch assignments. Every branch must belong to
    the scope's tenant; the primary defaults to the first branch given.
    """
    profile = _staff_profile(tx, user_id)

    wanted = list(dict.fromkeys(str(b) for b in branch_ids))
    if not wanted:
        raise ValidationError({"branch_ids": "At least one branch is required."})

    known = {
        str(b)
        for b in branches_for_tenant(tenant_id=tx.context.tenant_id)
        .filter(id__in=wanted)
        .values_list("id", flat=True)
    }
    unknown = [b for b in wanted if b not in known]
    if unknown:
        raise ValidationError({"branch_ids": f"Unknown branch for this tenant: {', '.join(unknown)}"})

    primary = str(primary_branch_id) if primary_branch_id else wanted[0]
    if primary not in wanted:
        raise ValidationError({"primary_branch_id": "Primary branch must be one of branch_ids."})

    before = _assigned_branch_ids(profile)

    BranchAssignment.objects.filter(staff_profile=profile).delete()
    BranchAssignment.objects.bulk_create(
        [BranchAssignment(staff_profile=profile, branch_id=b, is_primary=(b == primary)) for b in wanted]
    )

    after = _assigned_branch_ids(profile)
    record_audit(
        tx,
        action=AuditAction.USER_BRANCHES_ASSIGN,
        entity_type=EntityType.USER,
        entity_id=user_id,
        old_values={"branch_ids": before},
        new_values={"branch_ids": after, "primary_branch_id": primary},
        request=request,
    )
    return after


def remove_branch_assignment(tx: ScopedTransaction, user_id, branch_id: str, *, request=None) -> None:
    profile = _staff_profile(tx, user_id)

    assignment = BranchAssignment.objects.filter(staff_profile=profile, branch_id=branch_id).first()
    if assignment is None:
        raise NotFound(ASSIGNMENT_NOT_FOUND_MSG)

    if profile.branch_assignments.count() <= 1:
        raise BadRequest(LAST_ASSIGNMENT_MSG)

    assignment.delete()

    record_audit(
        tx,
        action=AuditAction.USER_BRANCH_REMOVE,
        entity_type=EntityType.USER,
        entity_id=user_id,
        old_values={"branch_id": str(branch_id)},
        request=request,
    )
