# ho_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from ho_core.audit.api.serializers import AuditEventSerializer, AuditQuerySerializer
from ho_core.audit.models import AuditEvent
from ho_core.audit.selectors import list_audit_events
from ho_core.iam.permissions import AuditLogPermission
from ho_core.tenancy.gateway import run_scoped
from ho_core.tenancy.permissions import HasTenantContext


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    Audit log of the caller's tenant, newest first.
    """
    permission_classes = [IsAuthenticated, HasTenantContext, AuditLogPermission]
    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="entity_type", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="entity_id", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="action", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="actor_user_id", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="start_date", type=OpenApiTypes.DATETIME, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="end_date", type=OpenApiTypes.DATETIME, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        q = AuditQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        f = q.validated_data

        def unit(tx):
            qs = list_audit_events(
                context=tx.context,
                entity_type=f.get("entity_type"),
                entity_id=f.get("entity_id"),
                action=f.get("action"),
                actor_user_id=f.get("actor_user_id"),
                start=f.get("start_date"),
                end=f.get("end_date"),
            )
            page = self.paginate_queryset(qs)
            return self.get_paginated_response(AuditEventSerializer(page, many=True).data)

        return run_scoped(request, unit)
