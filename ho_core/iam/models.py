# ho_core/iam/models.py
import uuid
from django.conf import settings
from django.db import models
from ho_core.branches.models import Branch
from ho_core.tenants.models import Tenant


class StaffRole(models.TextChoices):
    SUPER_ADMIN = "super_admin", "Super admin"
    BRANCH_ADMIN = "branch_admin", "Branch admin"
    DOCTOR = "doctor", "Doctor"
    NURSE = "nurse", "Nurse"
    RECEPTIONIST = "receptionist", "Receptionist"
    PHARMACIST = "pharmacist", "Pharmacist"
    LAB_TECH = "lab_tech", "Lab technician"
    ACCOUNTANT = "accountant", "Accountant"


class StaffProfile(models.Model):
    """
    Clinic staff identity anchored to Django's AUTH_USER_MODEL.
    A staff member belongs to exactly one tenant.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="staff_profile")
    tenant = models.ForeignKey(Tenant, on_delete=models.PROTECT, related_name="staff_profiles")
    role = models.CharField(max_length=32, choices=StaffRole.choices, default=StaffRole.RECEPTIONIST)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_staff_profile"
        indexes = [
            models.Index(fields=["tenant", "is_active"], name="staff_tenant_active_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user.get_username()} ({self.tenant.slug})"


class BranchAssignment(models.Model):
    """
    Grants a staff member access to one branch of their tenant.
    The set of active assignments is the user's accessible-branch set.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    staff_profile = models.ForeignKey(StaffProfile, on_delete=models.CASCADE, related_name="branch_assignments")
    branch = models.ForeignKey(Branch, on_delete=models.CASCADE, related_name="assignments")

    is_primary = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "iam_branch_assignment"
        constraints = [
            models.UniqueConstraint(fields=["staff_profile", "branch"], name="uq_staff_branch_assignment"),
        ]
