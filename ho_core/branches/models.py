# ho_core/branches/models.py
from __future__ import annotations

import uuid

from django.db import models

from ho_core.tenants.models import Tenant


class Branch(models.Model):
    """
    A facility/location (hospital, clinic, lab) under a Tenant.

    Staff act within a branch through BranchAssignment; the branch a request
    acts within is carried by TenantContext.branch_id.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(Tenant, on_delete=models.PROTECT, related_name="branches")

    name = models.CharField(max_length=255)
    code = models.SlugField(max_length=20)  # unique per tenant

    # Address (optional)
    address = models.TextField(blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=100, blank=True, default="")
    pincode = models.CharField(max_length=10, blank=True, default="")

    # Contact (optional)
    phone = models.CharField(max_length=20, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    gstin = models.CharField(max_length=20, blank=True, default="")

    timezone = models.CharField(max_length=50, default="Asia/Kolkata")
    currency = models.CharField(max_length=3, default="INR")

    is_active = models.BooleanField(default=True, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True)  # soft delete

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "branches_branch"
        constraints = [
            models.UniqueConstraint(fields=["tenant", "code"], name="uq_branch_tenant_code"),
        ]
        indexes = [
            models.Index(fields=["tenant", "is_active"], name="branch_tenant_active_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"
