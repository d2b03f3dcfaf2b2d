# ho_core/conftest.py
import pytest
from django.contrib.auth import get_user_model
from django.db import connection
from rest_framework.test import APIClient

from ho_core.branches.models import Branch
from ho_core.common.api.exceptions import ConfigurationFailure
from ho_core.iam.models import BranchAssignment, StaffProfile, StaffRole
from ho_core.tenancy import gateway
from ho_core.tenancy.context import TenantContext
from ho_core.tenants.models import Tenant


class SessionRecorder:
    """
    Stands in for gateway.configure_session and records every call.

    On PostgreSQL the real function still runs (set_config is executed); elsewhere
    only its preconditions are enforced, since set_config does not exist there.
    """

    def __init__(self, real=None):
        self.real = real
        self.calls = []

    def __call__(self, executor, context):
        if self.real is not None:
            self.real(executor, context)
        else:
            if not isinstance(context, TenantContext):
                raise TypeError(f"configure_session() requires a TenantContext, got {type(context).__name__}")
            if not executor.in_atomic_block:
                raise ConfigurationFailure()
        self.calls.append((executor.alias, context))

    @property
    def contexts(self):
        return [ctx for _, ctx in self.calls]

    @property
    def last(self):
        return self.calls[-1][1] if self.calls else None


@pytest.fixture(autouse=True)
def session_recorder(monkeypatch):
    real = gateway.configure_session if connection.vendor == "postgresql" else None
    recorder = SessionRecorder(real=real)
    monkeypatch.setattr(gateway, "configure_session", recorder)
    return recorder


@pytest.fixture
def tenant(db):
    return Tenant.objects.create(name="Test Hospital", slug="test-hospital")


@pytest.fixture
def other_tenant(db):
    return Tenant.objects.create(name="Other Hospital", slug="other-hospital")


@pytest.fixture
def branch(db, tenant):
    return Branch.objects.create(tenant=tenant, code="main", name="Main Branch", city="Pune")


@pytest.fixture
def second_branch(db, tenant):
    return Branch.objects.create(tenant=tenant, code="annex", name="Annex Branch", city="Mumbai")


@pytest.fixture
def other_branch(db, other_tenant):
    return Branch.objects.create(tenant=other_tenant, code="main", name="Other Main")


@pytest.fixture
def make_staff(db):
    """
    Creates a user with a staff profile in `tenant` and an assignment per branch:
      auth_user -> StaffProfile -> BranchAssignment -> Branch
    """
    User = get_user_model()

    def _make(username, *, tenant, branches=(), role=StaffRole.RECEPTIONIST):
        user = User.objects.create_user(username=username, password="testpass", is_active=True)
        profile = StaffProfile.objects.create(user=user, tenant=tenant, role=role, is_active=True)
        for i, b in enumerate(branches):
            BranchAssignment.objects.create(staff_profile=profile, branch=b, is_primary=(i == 0), is_active=True)
        return user

    return _make


@pytest.fixture
def user(make_staff, tenant, branch, second_branch):
    """Branch admin assigned to both branches of `tenant`."""
    return make_staff("admin", tenant=tenant, branches=[branch, second_branch], role=StaffRole.BRANCH_ADMIN)


@pytest.fixture
def owner(make_staff, tenant, branch):
    """Super admin of `tenant`."""
    return make_staff("owner", tenant=tenant, branches=[branch], role=StaffRole.SUPER_ADMIN)


@pytest.fixture
def single_branch_user(make_staff, tenant, branch):
    return make_staff("reception", tenant=tenant, branches=[branch])


@pytest.fixture
def unassigned_user(make_staff, tenant):
    return make_staff("floater", tenant=tenant, branches=[])


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def client_for():
    def _client(u):
        c = APIClient()
        c.force_authenticate(user=u)
        return c

    return _client


@pytest.fixture
def owner_client(client_for, owner):
    return client_for(owner)
