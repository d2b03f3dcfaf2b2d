# ho_core/iam/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ho_core.iam.api.serializers import AssignBranchesSerializer, AssignedBranchesSerializer
from ho_core.iam.permissions import StaffAssignmentPermission
from ho_core.iam.services.assignments import (
    ASSIGNMENT_NOT_FOUND_MSG,
    assign_branches,
    remove_branch_assignment,
)
from ho_core.tenancy.gateway import run_scoped
from ho_core.tenancy.permissions import HasTenantContext


class StaffBranchesView(APIView):
    """POST /users/{user_id}/branches/ replaces the staff member's branch set."""
    permission_classes = [IsAuthenticated, HasTenantContext, StaffAssignmentPermission]

    @extend_schema(request=AssignBranchesSerializer, responses={200: AssignedBranchesSerializer}, tags=["Users"])
    def post(self, request, user_id: int):
        s = AssignBranchesSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        def unit(tx):
            return assign_branches(
                tx,
                user_id,
                s.validated_data["branch_ids"],
                primary_branch_id=s.validated_data.get("primary_branch_id"),
                request=request,
            )

        branch_ids = run_scoped(request, unit)
        return Response({"user_id": str(user_id), "branch_ids": branch_ids}, status=status.HTTP_200_OK)


class StaffBranchDetailView(APIView):
    """DELETE /users/{user_id}/branches/{branch_id}/ removes one assignment."""
    permission_classes = [IsAuthenticated, HasTenantContext, StaffAssignmentPermission]

    @extend_schema(responses={204: None}, tags=["Users"])
    def delete(self, request, user_id: int, branch_id: str):
        try:
            branch_id = str(UUID(str(branch_id)))
        except ValueError:
            raise NotFound(ASSIGNMENT_NOT_FOUND_MSG)

        run_scoped(request, lambda tx: remove_branch_assignment(tx, user_id, branch_id, request=request))
        return Response(status=status.HTTP_204_NO_CONTENT)
