# ho_core/audit/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from ho_core.audit.models import AuditEvent


class AuditEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = AuditEvent
        fields = [
            "id",
            "tenant_id",
            "branch_id",
            "actor_user_id",
            "action",
            "entity_type",
            "entity_id",
            "old_values",
            "new_values",
            "ip_address",
            "request_id",
            "created_at",
        ]
        read_only_fields = fields


class AuditQuerySerializer(serializers.Serializer):
    entity_type = serializers.CharField(required=False)
    entity_id = serializers.CharField(required=False)
    action = serializers.CharField(required=False)
    actor_user_id = serializers.CharField(required=False)
    start_date = serializers.DateTimeField(required=False)
    end_date = serializers.DateTimeField(required=False)
