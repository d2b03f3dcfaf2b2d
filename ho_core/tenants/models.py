# ho_core/tenants/models.py
import uuid
from django.db import models


class TenantStatus(models.TextChoices):
    ACTIVE = "ACTIVE", "Active"
    SUSPENDED = "SUSPENDED", "Suspended"
    CANCELLED = "CANCELLED", "Cancelled"


class SubscriptionPlan(models.TextChoices):
    TRIAL = "trial", "Trial"
    BASIC = "basic", "Basic"
    PROFESSIONAL = "professional", "Professional"
    ENTERPRISE = "enterprise", "Enterprise"


class Tenant(models.Model):
    """
    Top-level organization (hospital group / clinic chain).
    Root of all isolation: rows of one tenant are never visible to another.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=100, unique=True)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=20, blank=True, default="")

    status = models.CharField(
        max_length=16,
        choices=TenantStatus.choices,
        default=TenantStatus.ACTIVE,
        db_index=True,
    )
    subscription_plan = models.CharField(
        max_length=32,
        choices=SubscriptionPlan.choices,
        default=SubscriptionPlan.TRIAL,
    )

    # feature flags, onboarding state etc.
    settings = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "tenants_tenant"
        indexes = [
            models.Index(fields=["status"], name="tenant_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.slug})"
