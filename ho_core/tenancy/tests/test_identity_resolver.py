import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory
from rest_framework.exceptions import NotAuthenticated

from ho_core.iam.models import BranchAssignment, StaffProfile
from ho_core.tenancy.identity import NO_TENANT_MSG, resolve_identity

pytestmark = pytest.mark.django_db


def _request(user, auth=None):
    req = RequestFactory().get("/api/v1/session/context/")
    req.user = user
    req.auth = auth
    return req


def test_anonymous_request_is_rejected():
    with pytest.raises(NotAuthenticated):
        resolve_identity(_request(AnonymousUser()))


def test_user_without_staff_profile_is_rejected():
    u = get_user_model().objects.create_user(username="nobody", password="pass123")

    with pytest.raises(NotAuthenticated) as exc:
        resolve_identity(_request(u))
    assert str(exc.value.detail) == NO_TENANT_MSG


def test_inactive_staff_profile_is_rejected(user):
    StaffProfile.objects.filter(user=user).update(is_active=False)

    with pytest.raises(NotAuthenticated):
        resolve_identity(_request(user))


def test_membership_graph_identity(user, tenant, branch, second_branch):
    ident = resolve_identity(_request(user))

    assert ident.user_id == str(user.pk)
    assert ident.tenant_id == str(tenant.id)
    assert ident.branch_ids == frozenset({str(branch.id), str(second_branch.id)})


def test_inactive_assignments_and_branches_are_not_accessible(user, branch, second_branch):
    BranchAssignment.objects.filter(branch=branch).update(is_active=False)
    second_branch.is_active = False
    second_branch.save(update_fields=["is_active"])

    assert resolve_identity(_request(user)).branch_ids == frozenset()


def test_assignment_to_foreign_tenant_branch_is_ignored(single_branch_user, branch, other_branch):
    BranchAssignment.objects.create(staff_profile=single_branch_user.staff_profile, branch=other_branch)

    assert resolve_identity(_request(single_branch_user)).branch_ids == frozenset({str(branch.id)})


def test_token_claims_win_over_membership(single_branch_user, other_tenant, other_branch):
    claims = {"tenant_id": str(other_tenant.id), "branch_ids": [str(other_branch.id)]}

    ident = resolve_identity(_request(single_branch_user, auth=claims))

    assert ident.tenant_id == str(other_tenant.id)
    assert ident.branch_ids == frozenset({str(other_branch.id)})


def test_token_without_tenant_claim_falls_back_to_membership(single_branch_user, tenant):
    ident = resolve_identity(_request(single_branch_user, auth={"user_id": single_branch_user.pk}))

    assert ident.tenant_id == str(tenant.id)
