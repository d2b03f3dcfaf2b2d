# ho_core/tenants/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ho_core.iam.permissions import TenantPermission
from ho_core.tenancy.gateway import run_scoped
from ho_core.tenancy.permissions import HasTenantContext
from ho_core.tenants.api.serializers import TenantSerializer, TenantUpdateSerializer
from ho_core.tenants.services import current_tenant, update_current_tenant


class CurrentTenantView(APIView):
    """
    The caller's own tenant. There is no tenant id in the URL: the tenant is
    always the one the request was bound to.
    """
    permission_classes = [IsAuthenticated, HasTenantContext, TenantPermission]

    @extend_schema(responses={200: TenantSerializer}, tags=["Tenants"])
    def get(self, request):
        data = run_scoped(request, lambda tx: TenantSerializer(current_tenant(tx)).data)
        return Response(data, status=status.HTTP_200_OK)

    @extend_schema(request=TenantUpdateSerializer, responses={200: TenantSerializer}, tags=["Tenants"])
    def patch(self, request):
        s = TenantUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        def unit(tx):
            return TenantSerializer(update_current_tenant(tx, s.validated_data, request=request)).data

        return Response(run_scoped(request, unit), status=status.HTTP_200_OK)
