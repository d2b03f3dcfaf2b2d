# ho_core/iam/api/serializers.py
from __future__ import annotations

from rest_framework import serializers


class AssignBranchesSerializer(serializers.Serializer):
    branch_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    primary_branch_id = serializers.UUIDField(required=False, allow_null=True)


class AssignedBranchesSerializer(serializers.Serializer):
    user_id = serializers.CharField()
    branch_ids = serializers.ListField(child=serializers.CharField())
