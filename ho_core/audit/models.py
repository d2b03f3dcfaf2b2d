# ho_core/audit/models.py
import uuid

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class AuditEvent(models.Model):
    """
    Immutable audit record of a sensitive action.
    Insert/select only; RLS forbids updates and deletes on PostgreSQL.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant_id = models.UUIDField(db_index=True)
    branch_id = models.UUIDField(null=True, blank=True, db_index=True)
    actor_user_id = models.CharField(max_length=64, blank=True, default="")

    action = models.CharField(max_length=64, db_index=True)  # e.g. "branch.update"
    entity_type = models.CharField(max_length=64)  # e.g. "branch"
    entity_id = models.CharField(max_length=64, blank=True, default="")

    old_values = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    new_values = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)

    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=512, blank=True, default="")
    request_id = models.CharField(max_length=64, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["tenant_id", "created_at"], name="audit_tenant_created_idx"),
            models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.entity_type}:{self.entity_id}"
