import uuid

import pytest

from ho_core.audit.models import AuditEvent
from ho_core.audit.services import AuditAction
from ho_core.branches.models import Branch
from ho_core.tenancy.binder import BRANCH_REQUIRED_MSG
from ho_core.tests.helpers import branch_headers

pytestmark = pytest.mark.django_db

URL = "/api/v1/branches/"


def test_list_returns_only_own_tenant_branches(api_client, branch, second_branch, other_branch):
    r = api_client.get(URL)

    assert r.status_code == 200, r.data
    assert r.data["count"] == 2
    assert {b["id"] for b in r.data["results"]} == {str(branch.id), str(second_branch.id)}


def test_list_search_and_filters(api_client, branch, second_branch):
    r = api_client.get(URL, {"search": "annex"})
    assert [b["code"] for b in r.data["results"]] == ["annex"]

    r = api_client.get(URL, {"city": "Pune"})
    assert [b["code"] for b in r.data["results"]] == ["main"]


def test_list_ordering(api_client, branch, second_branch):
    r = api_client.get(URL, {"ordering": "-code"})

    assert [b["code"] for b in r.data["results"]] == ["main", "annex"]


def test_retrieve_own_branch(api_client, branch):
    r = api_client.get(f"{URL}{branch.id}/")

    assert r.status_code == 200, r.data
    assert r.data["code"] == "main"
    assert str(r.data["tenant_id"]) == str(branch.tenant_id)


def test_retrieve_foreign_or_malformed_branch_is_404(api_client, other_branch):
    for pk in (other_branch.id, uuid.uuid4(), "nope"):
        r = api_client.get(f"{URL}{pk}/")
        assert r.status_code == 404, r.data
        assert r.data["error"]["code"] == "not_found"


def test_current_requires_branch_selection(api_client):
    r = api_client.get(f"{URL}current/")

    assert r.status_code == 403, r.data
    assert r.data["error"]["message"] == BRANCH_REQUIRED_MSG


def test_current_returns_selected_branch(api_client, second_branch):
    r = api_client.get(f"{URL}current/", **branch_headers(second_branch))

    assert r.status_code == 200, r.data
    assert r.data["id"] == str(second_branch.id)


def test_current_uses_auto_selected_branch(client_for, single_branch_user, branch):
    r = client_for(single_branch_user).get(f"{URL}current/")

    assert r.status_code == 200, r.data
    assert r.data["id"] == str(branch.id)


def test_patch_updates_and_audits(api_client, user, branch):
    r = api_client.patch(
        f"{URL}{branch.id}/",
        {"phone": "9999999999", "city": "Pune"},
        format="json",
        **branch_headers(branch),
    )

    assert r.status_code == 200, r.data
    assert r.data["phone"] == "9999999999"

    event = AuditEvent.objects.get(entity_id=str(branch.id))
    assert event.action == AuditAction.BRANCH_UPDATE
    assert event.tenant_id == branch.tenant_id
    assert event.branch_id == branch.id
    assert event.actor_user_id == str(user.pk)
    # unchanged fields are not recorded
    assert event.old_values == {"phone": ""}
    assert event.new_values == {"phone": "9999999999"}


def test_patch_deactivation_is_audited_as_such(api_client, branch):
    r = api_client.patch(f"{URL}{branch.id}/", {"is_active": False}, format="json")

    assert r.status_code == 200, r.data
    assert Branch.objects.get(id=branch.id).is_active is False
    assert AuditEvent.objects.get(entity_id=str(branch.id)).action == AuditAction.BRANCH_DEACTIVATE


def test_patch_without_changes_writes_no_audit(api_client, branch):
    r = api_client.patch(f"{URL}{branch.id}/", {"name": branch.name}, format="json")

    assert r.status_code == 200, r.data
    assert not AuditEvent.objects.exists()


def test_patch_foreign_branch_is_404(api_client, other_branch):
    r = api_client.patch(f"{URL}{other_branch.id}/", {"name": "Hijacked"}, format="json")

    assert r.status_code == 404, r.data
    assert Branch.objects.get(id=other_branch.id).name == "Other Main"


def test_patch_requires_admin_role(client_for, single_branch_user, branch):
    r = client_for(single_branch_user).patch(f"{URL}{branch.id}/", {"name": "Renamed"}, format="json")

    assert r.status_code == 403, r.data
    assert r.data["error"]["code"] == "permission_denied"


def test_patch_validation_error_envelope(api_client, branch):
    r = api_client.patch(f"{URL}{branch.id}/", {"email": "not-an-email"}, format="json")

    assert r.status_code == 400, r.data
    assert r.data["error"]["code"] == "validation_error"
    assert "email" in r.data["error"]["details"]
