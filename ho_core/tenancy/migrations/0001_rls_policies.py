"""
Row-level security for tenant data on PostgreSQL.

Policies read the transaction-local settings written by
ho_core.tenancy.gateway.configure_session. The iam_* tables stay outside RLS:
they are read while resolving identity, before any tenant context exists.
"""
from django.db import migrations

FORWARD_SQL = [
    """
    CREATE OR REPLACE FUNCTION app_current_tenant_id() RETURNS uuid AS $$
    BEGIN
      RETURN NULLIF(current_setting('app.current_tenant_id', true), '')::uuid;
    EXCEPTION
      WHEN OTHERS THEN
        RETURN NULL;
    END;
    $$ LANGUAGE plpgsql STABLE;
    """,
    """
    CREATE OR REPLACE FUNCTION app_current_branch_id() RETURNS uuid AS $$
    BEGIN
      RETURN NULLIF(current_setting('app.current_branch_id', true), '')::uuid;
    EXCEPTION
      WHEN OTHERS THEN
        RETURN NULL;
    END;
    $$ LANGUAGE plpgsql STABLE;
    """,
    """
    CREATE OR REPLACE FUNCTION app_current_user_id() RETURNS text AS $$
      SELECT NULLIF(current_setting('app.current_user_id', true), '');
    $$ LANGUAGE sql STABLE;
    """,
    "ALTER TABLE tenants_tenant ENABLE ROW LEVEL SECURITY;",
    "ALTER TABLE branches_branch ENABLE ROW LEVEL SECURITY;",
    "ALTER TABLE audit_audit_event ENABLE ROW LEVEL SECURITY;",
    """
    CREATE POLICY tenant_isolation_tenants ON tenants_tenant
      FOR ALL USING (id = app_current_tenant_id());
    """,
    """
    CREATE POLICY tenant_isolation_branches ON branches_branch
      FOR ALL USING (tenant_id = app_current_tenant_id())
      WITH CHECK (tenant_id = app_current_tenant_id());
    """,
    # Audit is append-only: select + insert, narrowed to the bound branch when one is set.
    """
    CREATE POLICY tenant_select_audit_events ON audit_audit_event
      FOR SELECT USING (
        tenant_id = app_current_tenant_id()
        AND (app_current_branch_id() IS NULL OR branch_id IS NULL OR branch_id = app_current_branch_id())
      );
    """,
    """
    CREATE POLICY tenant_insert_audit_events ON audit_audit_event
      FOR INSERT WITH CHECK (tenant_id = app_current_tenant_id());
    """,
]

REVERSE_SQL = [
    "DROP POLICY IF EXISTS tenant_insert_audit_events ON audit_audit_event;",
    "DROP POLICY IF EXISTS tenant_select_audit_events ON audit_audit_event;",
    "DROP POLICY IF EXISTS tenant_isolation_branches ON branches_branch;",
    "DROP POLICY IF EXISTS tenant_isolation_tenants ON tenants_tenant;",
    "ALTER TABLE audit_audit_event DISABLE ROW LEVEL SECURITY;",
    "ALTER TABLE branches_branch DISABLE ROW LEVEL SECURITY;",
    "ALTER TABLE tenants_tenant DISABLE ROW LEVEL SECURITY;",
    "DROP FUNCTION IF EXISTS app_current_user_id();",
    "DROP FUNCTION IF EXISTS app_current_branch_id();",
    "DROP FUNCTION IF EXISTS app_current_tenant_id();",
]


def _run(statements):
    def apply(apps, schema_editor):
        if schema_editor.connection.vendor != "postgresql":
            return
        for sql in statements:
            schema_editor.execute(sql)

    return apply


class Migration(migrations.Migration):

    dependencies = [
        ("tenants", "0001_initial"),
        ("branches", "0001_initial"),
        ("audit", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(_run(FORWARD_SQL), _run(REVERSE_SQL)),
    ]
