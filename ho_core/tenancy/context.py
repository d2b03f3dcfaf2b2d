# ho_core/tenancy/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from rest_framework.exceptions import NotAuthenticated


@dataclass(frozen=True)
class Identity:
    """
    Who is calling: an authenticated staff member, their tenant and the
    branches they may act within. Derived per request, never persisted.
    """
    user_id: str
    tenant_id: str
    branch_ids: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def build(cls, *, user_id, tenant_id, branch_ids: Iterable = ()) -> "Identity":
        return cls(
            user_id=str(user_id),
            tenant_id=str(tenant_id),
            branch_ids=frozenset(str(b) for b in branch_ids),
        )

    def can_access(self, branch_id: Optional[str]) -> bool:
        return branch_id is not None and branch_id in self.branch_ids


@dataclass(frozen=True)
class TenantContext:
    """
    Isolation context of one request (or one explicit transaction).

    tenant_id and user_id are mandatory: a context without them cannot be
    constructed, so every value that reaches the gateway is usable.
    """
    tenant_id: str
    user_id: str
    branch_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.tenant_id or not str(self.tenant_id).strip():
            raise ValueError("TenantContext requires a tenant_id.")
        if not self.user_id or not str(self.user_id).strip():
            raise ValueError("TenantContext requires a user_id.")
        if self.branch_id is not None and not str(self.branch_id).strip():
            raise ValueError("TenantContext.branch_id must be a non-empty id or None.")

    @property
    def has_branch(self) -> bool:
        return self.branch_id is not None

    def as_dict(self) -> dict:
        return {
            "tenant_id": self.tenant_id,
            "branch_id": self.branch_id,
            "user_id": self.user_id,
        }


CONTEXT_ATTR = "tenant_context"
CONTEXT_NOT_SET_MSG = "Tenant context not set"


def _http_request(request):
    # DRF's Request wraps the Django HttpRequest; store on the latter so
    # middleware and the DRF layer read the same slot.
    return getattr(request, "_request", request)


def attach_context(request, context: Optional[TenantContext]) -> None:
    setattr(_http_request(request), CONTEXT_ATTR, context)


def get_context(request) -> TenantContext:
    context = getattr(_http_request(request), CONTEXT_ATTR, None)
    if not isinstance(context, TenantContext):
        raise NotAuthenticated(CONTEXT_NOT_SET_MSG)
    return context
