# ho_core/tenancy/api/views.py

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ho_core.iam.services.membership import list_user_branches
from ho_core.tenancy.api.serializers import SessionContextResponseSerializer
from ho_core.tenancy.gateway import run_scoped
from ho_core.tenancy.permissions import HasTenantContext


class SessionContextView(APIView):
    """
    Frontend bootstrap: the context this request was bound to, plus the branches
    the caller can switch to with the X-Branch-Id header.
    """
    permission_classes = [IsAuthenticated, HasTenantContext]

    @extend_schema(
        responses={200: SessionContextResponseSerializer},
        tags=["Tenancy"],
        parameters=[
            OpenApiParameter(name="X-Branch-Id", location=OpenApiParameter.HEADER, required=False, type=str),
        ],
    )
    def get(self, request):
        def unit(tx):
            return {
                "context": tx.context.as_dict(),
                "branches": list_user_branches(request.user.pk),
            }

        return Response(run_scoped(request, unit), status=status.HTTP_200_OK)
