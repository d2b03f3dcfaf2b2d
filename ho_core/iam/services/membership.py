# ho_core/iam/services/membership.py
from __future__ import annotations

from typing import Optional

from ho_core.iam.models import BranchAssignment, StaffProfile
from ho_core.tenancy.context import Identity, TenantContext
from ho_core.tenancy.gateway import scoped_transaction


def active_staff_profile(user_id) -> Optional[StaffProfile]:
    # iam tables only: this runs before any tenant scope exists.
    return StaffProfile.objects.filter(user_id=user_id, is_active=True).first()


def own_tenant_scope(profile: StaffProfile) -> TenantContext:
    """
    Branch-less scope of the staff member's own tenant, for membership reads
    that join row-level-secured tables (branches).
    """
    return TenantContext(tenant_id=str(profile.tenant_id), user_id=str(profile.user_id))


def accessible_branch_ids(profile: StaffProfile) -> list[str]:
    """
    Branch ids the staff member may act within.

    Canonical membership graph:
      auth_user -> StaffProfile(tenant) -> BranchAssignment -> Branch
    Only active assignments to active branches of the profile's own tenant count.
    The branch join runs under the profile's tenant scope; outside a scope
    PostgreSQL policies hide every branch.
    """
    with scoped_transaction(own_tenant_scope(profile)):
        ids = list(
            BranchAssignment.objects.filter(
                staff_profile=profile,
                is_active=True,
                branch__is_active=True,
                branch__deleted_at__isnull=True,
                branch__tenant=profile.tenant_id,
            )
            .order_by("branch_id")
            .values_list("branch_id", flat=True)
        )
    return [str(i) for i in ids]


def identity_for_user(user_id) -> Optional[Identity]:
    """
    Identity derived from the membership graph, or None when the user has no
    active staff profile (and therefore no tenant).
    """
    profile = active_staff_profile(user_id)
    if profile is None:
        return None
    return Identity.build(
        user_id=user_id,
        tenant_id=profile.tenant_id,
        branch_ids=accessible_branch_ids(profile),
    )


def list_user_branches(user_id) -> list[dict]:
    """
    Branch assignments for the session/context response.
    Call inside a scoped transaction.
    """
    qs = (
        BranchAssignment.objects.select_related("branch", "staff_profile")
        .filter(
            staff_profile__user_id=user_id,
            staff_profile__is_active=True,
            is_active=True,
            branch__is_active=True,
            branch__deleted_at__isnull=True,
        )
        .order_by("branch__name")
    )

    return [
        {
            "branch_id": str(a.branch_id),
            "branch_code": a.branch.code,
            "branch_name": a.branch.name,
            "is_primary": bool(a.is_primary),
        }
        for a in qs
    ]
