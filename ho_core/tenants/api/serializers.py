# ho_core/tenants/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from ho_core.tenants.models import Tenant


class TenantSerializer(serializers.ModelSerializer):
    class Meta:
        model = Tenant
        fields = [
            "id",
            "name",
            "slug",
            "email",
            "phone",
            "status",
            "subscription_plan",
            "settings",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TenantUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=255, required=False)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.RegexField(r"^[6-9]\d{9}$", required=False, allow_blank=True)
    settings = serializers.DictField(required=False)
