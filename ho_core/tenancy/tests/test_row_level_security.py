"""
Row-level security as the application sees it.

Table owners bypass RLS, so these tests switch to a plain role that only holds
table privileges, the way the application connects in production.
"""
from contextlib import contextmanager

import pytest
from django.db import DatabaseError, connection, transaction

from ho_core.audit.models import AuditEvent
from ho_core.branches.models import Branch
from ho_core.iam.services.membership import identity_for_user
from ho_core.iam.tokens import BRANCHES_CLAIM, TENANT_CLAIM, StaffAccessToken
from ho_core.tenancy.context import TenantContext
from ho_core.tenancy.gateway import scoped_transaction
from ho_core.tenants.models import Tenant
from ho_core.tests.helpers import branch_headers, requires_postgres

pytestmark = [
    requires_postgres,
    pytest.mark.postgres,
    pytest.mark.django_db(transaction=True),
]

APP_ROLE = "ho_rls_app"
APP_TABLES = [
    "tenants_tenant",
    "branches_branch",
    "audit_audit_event",
    "iam_staff_profile",
    "iam_branch_assignment",
]

CREATE_ROLE_SQL = f"""
DO $$
BEGIN
  IF NOT EXISTS (SELECT 1 FROM pg_roles WHERE rolname = '{APP_ROLE}') THEN
    CREATE ROLE {APP_ROLE} NOLOGIN;
  END IF;
END
$$;
"""


@pytest.fixture
def app_role():
    try:
        with connection.cursor() as cur:
            cur.execute(CREATE_ROLE_SQL)
            cur.execute(f"GRANT {APP_ROLE} TO CURRENT_USER")
            cur.execute(f"GRANT SELECT, INSERT, UPDATE ON {', '.join(APP_TABLES)} TO {APP_ROLE}")
    except DatabaseError as exc:
        pytest.skip(f"database user cannot manage roles: {exc}")
    return APP_ROLE


@contextmanager
def acting_as(role):
    """Runs the block in one transaction under `role`; the role ends with it."""
    with transaction.atomic():
        with connection.cursor() as cur:
            cur.execute(f"SET LOCAL ROLE {role}")
        yield


def _scope(tenant, branch=None):
    return TenantContext(
        tenant_id=str(tenant.id),
        user_id="1",
        branch_id=str(branch.id) if branch is not None else None,
    )


def test_identity_resolves_without_owner_privileges(app_role, user, tenant, branch, second_branch, other_branch):
    with acting_as(app_role):
        identity = identity_for_user(user.pk)
        token = StaffAccessToken.for_user(user)

    assert identity.tenant_id == str(tenant.id)
    assert identity.branch_ids == frozenset({str(branch.id), str(second_branch.id)})
    assert token[TENANT_CLAIM] == str(tenant.id)
    assert set(token[BRANCHES_CLAIM]) == {str(branch.id), str(second_branch.id)}


def test_nothing_is_visible_without_a_scope(app_role, branch, other_branch):
    with acting_as(app_role):
        assert Tenant.objects.count() == 0
        assert Branch.objects.count() == 0


def test_scope_hides_other_tenants_rows(app_role, tenant, branch, second_branch, other_tenant, other_branch):
    with acting_as(app_role), scoped_transaction(_scope(tenant)):
        # unfiltered queries: only the policies stand between tenants here
        visible_branches = set(Branch.objects.values_list("id", flat=True))
        visible_tenants = list(Tenant.objects.values_list("id", flat=True))
        foreign = Branch.objects.filter(tenant_id=other_tenant.id).count()

    assert visible_branches == {branch.id, second_branch.id}
    assert visible_tenants == [tenant.id]
    assert foreign == 0


def test_scope_cannot_write_into_another_tenant(app_role, tenant, branch, other_tenant):
    with acting_as(app_role), scoped_transaction(_scope(tenant)):
        with pytest.raises(DatabaseError):
            with transaction.atomic():
                Branch.objects.create(tenant_id=other_tenant.id, code="planted", name="Planted")

        updated = Branch.objects.filter(code="main").update(name="Renamed")

    assert updated == 1
    assert not Branch.objects.filter(code="planted").exists()
    assert Branch.objects.get(id=branch.id).name == "Renamed"


def test_bound_branch_narrows_audit_events(app_role, tenant, branch, second_branch, other_tenant):
    main = AuditEvent.objects.create(tenant_id=tenant.id, branch_id=branch.id, action="branch.update", entity_type="branch")
    AuditEvent.objects.create(tenant_id=tenant.id, branch_id=second_branch.id, action="branch.update", entity_type="branch")
    tenant_wide = AuditEvent.objects.create(tenant_id=tenant.id, action="tenant.update", entity_type="tenant")
    AuditEvent.objects.create(tenant_id=other_tenant.id, action="tenant.update", entity_type="tenant")

    with acting_as(app_role), scoped_transaction(_scope(tenant, branch)):
        visible = set(AuditEvent.objects.values_list("id", flat=True))

    assert visible == {main.id, tenant_wide.id}


def test_request_runs_end_to_end_under_app_role(app_role, api_client, user, branch, second_branch, other_branch):
    with acting_as(app_role):
        listed = api_client.get("/api/v1/branches/")
        patched = api_client.patch(
            f"/api/v1/branches/{branch.id}/", {"city": "Nagpur"}, format="json", **branch_headers(branch)
        )

    assert listed.status_code == 200, listed.data
    assert listed.data["count"] == 2
    assert patched.status_code == 200, patched.data
    assert AuditEvent.objects.filter(entity_id=str(branch.id), branch_id=branch.id).exists()
