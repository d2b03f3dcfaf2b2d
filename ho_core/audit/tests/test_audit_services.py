import pytest
from django.test import RequestFactory

from ho_core.audit.models import AuditEvent
from ho_core.audit.services import AuditAction, EntityType, changed_fields, record_audit
from ho_core.tenancy.context import TenantContext
from ho_core.tenancy.gateway import scoped_transaction


def test_changed_fields_keeps_only_differences():
    old = {"name": "Main", "city": "Pune", "phone": ""}
    new = {"name": "Main", "phone": "123", "email": "a@b.c"}

    assert changed_fields(old, new) == (
        {"phone": "", "email": None},
        {"phone": "123", "email": "a@b.c"},
    )


def test_changed_fields_no_changes():
    assert changed_fields({"a": 1}, {"a": 1}) == ({}, {})


@pytest.mark.django_db
def test_record_audit_uses_scope_and_request_metadata(tenant, branch):
    ctx = TenantContext(tenant_id=str(tenant.id), user_id="7", branch_id=str(branch.id))
    req = RequestFactory().patch(
        "/api/v1/branches/",
        HTTP_X_FORWARDED_FOR="10.0.0.9, 10.0.0.1",
        HTTP_USER_AGENT="pytest",
    )
    req.request_id = "rid-1"

    with scoped_transaction(ctx) as tx:
        event = record_audit(
            tx,
            action=AuditAction.BRANCH_UPDATE,
            entity_type=EntityType.BRANCH,
            entity_id=branch.id,
            old_values={"name": "Main"},
            new_values={"name": "Main Campus"},
            request=req,
        )

    event = AuditEvent.objects.get(pk=event.pk)
    assert str(event.tenant_id) == str(tenant.id)
    assert str(event.branch_id) == str(branch.id)
    assert event.actor_user_id == "7"
    assert event.entity_id == str(branch.id)
    assert event.ip_address == "10.0.0.9"
    assert event.user_agent == "pytest"
    assert event.request_id == "rid-1"


@pytest.mark.django_db
def test_record_audit_failure_does_not_abort_the_unit(tenant, branch):
    ctx = TenantContext(tenant_id=str(tenant.id), user_id="7")

    with scoped_transaction(ctx) as tx:
        event = record_audit(
            tx,
            action=AuditAction.BRANCH_UPDATE,
            entity_type=EntityType.BRANCH,
            entity_id=branch.id,
            new_values={"unserialisable": object()},
        )
        branch.name = "Still Saved"
        branch.save(update_fields=["name"])

    assert event is None
    assert not AuditEvent.objects.exists()
    branch.refresh_from_db()
    assert branch.name == "Still Saved"
