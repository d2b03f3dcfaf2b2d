# ho_core/tenancy/api/serializers.py
from __future__ import annotations

from rest_framework import serializers


class TenantContextSerializer(serializers.Serializer):
    tenant_id = serializers.CharField()
    branch_id = serializers.CharField(allow_null=True)
    user_id = serializers.CharField()


class BranchMembershipSerializer(serializers.Serializer):
    branch_id = serializers.CharField()
    branch_code = serializers.CharField()
    branch_name = serializers.CharField()
    is_primary = serializers.BooleanField()


class SessionContextResponseSerializer(serializers.Serializer):
    context = TenantContextSerializer()
    branches = BranchMembershipSerializer(many=True)
