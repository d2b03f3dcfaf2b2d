# ho_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from ho_core.audit.api.views import AuditEventViewSet
from ho_core.branches.api.views import BranchViewSet
from ho_core.iam.api.views import StaffBranchDetailView, StaffBranchesView
from ho_core.tenancy.api.views import SessionContextView
from ho_core.tenants.api.views import CurrentTenantView

router = DefaultRouter()
router.register(r"branches", BranchViewSet, basename="branches")
router.register(r"audit-logs", AuditEventViewSet, basename="audit-logs")

urlpatterns = [
    path("session/context/", SessionContextView.as_view(), name="session-context"),
    path("tenants/current/", CurrentTenantView.as_view(), name="tenant-current"),

    path("users/<int:user_id>/branches/", StaffBranchesView.as_view(), name="user-branches"),
    path(
        "users/<int:user_id>/branches/<str:branch_id>/",
        StaffBranchDetailView.as_view(),
        name="user-branch-detail",
    ),

    *router.urls,
]
