# ho_core/branches/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ho_core.branches.api.serializers import BranchCreateSerializer, BranchSerializer, BranchUpdateSerializer
from ho_core.branches.models import Branch
from ho_core.branches.selectors import branch_by_id, branches_for_tenant
from ho_core.branches.services import BRANCH_NOT_FOUND_MSG, create_branch, delete_branch, update_branch
from ho_core.iam.permissions import BranchPermission
from ho_core.tenancy.gateway import run_scoped
from ho_core.tenancy.permissions import HasBranchContext, HasTenantContext


def _parse_branch_id(pk) -> str:
    try:
        return str(UUID(str(pk)))
    except ValueError:
        raise NotFound(BRANCH_NOT_FOUND_MSG)


def _get_branch(tx, branch_id: str) -> Branch:
    try:
        return branch_by_id(tenant_id=tx.context.tenant_id, branch_id=branch_id)
    except Branch.DoesNotExist:
        raise NotFound(BRANCH_NOT_FOUND_MSG)


class BranchViewSet(viewsets.GenericViewSet):
    """
    Branches of the caller's tenant. Every query runs through run_scoped, so
    PostgreSQL RLS sees the request's tenant/branch/user.
    """
    queryset = Branch.objects.none()
    serializer_class = BranchSerializer
    filterset_fields = ["is_active", "city", "state"]
    search_fields = ["name", "code"]
    ordering_fields = ["name", "code", "created_at"]

    def get_permissions(self):
        context_permission = HasBranchContext if self.action == "current" else HasTenantContext
        return [IsAuthenticated(), context_permission(), BranchPermission()]

    def list(self, request):
        def unit(tx):
            qs = self.filter_queryset(branches_for_tenant(tenant_id=tx.context.tenant_id))
            page = self.paginate_queryset(qs)
            if page is not None:
                return self.get_paginated_response(BranchSerializer(page, many=True).data)
            return Response(BranchSerializer(qs, many=True).data, status=status.HTTP_200_OK)

        return run_scoped(request, unit)

    @extend_schema(request=BranchCreateSerializer, responses={201: BranchSerializer})
    def create(self, request):
        s = BranchCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        def unit(tx):
            return BranchSerializer(create_branch(tx, s.validated_data, request=request)).data

        return Response(run_scoped(request, unit), status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        branch_id = _parse_branch_id(pk)

        def unit(tx):
            return BranchSerializer(_get_branch(tx, branch_id)).data

        return Response(run_scoped(request, unit), status=status.HTTP_200_OK)

    @extend_schema(request=BranchUpdateSerializer, responses={200: BranchSerializer})
    def partial_update(self, request, pk=None):
        branch_id = _parse_branch_id(pk)

        s = BranchUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        def unit(tx):
            return BranchSerializer(update_branch(tx, branch_id, s.validated_data, request=request)).data

        return Response(run_scoped(request, unit), status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        branch_id = _parse_branch_id(pk)
        run_scoped(request, lambda tx: delete_branch(tx, branch_id, request=request))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"], url_path="current")
    def current(self, request):
        def unit(tx):
            return BranchSerializer(_get_branch(tx, tx.context.branch_id)).data

        return Response(run_scoped(request, unit), status=status.HTTP_200_OK)
