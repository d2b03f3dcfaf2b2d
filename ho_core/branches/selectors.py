# ho_core/branches/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from ho_core.branches.models import Branch


def branches_for_tenant(*, tenant_id: str, active_only: bool = False) -> QuerySet[Branch]:
    qs = Branch.objects.filter(tenant_id=tenant_id, deleted_at__isnull=True)
    if active_only:
        qs = qs.filter(is_active=True)
    return qs.order_by("name")


def branch_by_id(*, tenant_id: str, branch_id: str) -> Branch:
    return branches_for_tenant(tenant_id=tenant_id).get(id=branch_id)


def count_branches(*, tenant_id: str) -> int:
    return branches_for_tenant(tenant_id=tenant_id).count()


def is_code_available(*, tenant_id: str, code: str) -> bool:
    # soft-deleted branches keep their code
    return not Branch.objects.filter(tenant_id=tenant_id, code=code).exists()
