import pytest
from django.conf import settings
from django.db import connections


def test_requests_run_in_a_transaction():
    # bind() applies the tenant scope to the request transaction
    assert connections["default"].settings_dict["ATOMIC_REQUESTS"] is True


def test_request_context_middleware_runs_after_authentication():
    mw = settings.MIDDLEWARE
    assert mw.index("ho_core.common.middleware.RequestContextMiddleware") > mw.index(
        "django.contrib.auth.middleware.AuthenticationMiddleware"
    )


def test_drf_uses_error_envelope_and_staff_tokens():
    assert settings.REST_FRAMEWORK["EXCEPTION_HANDLER"] == "ho_core.common.api.exceptions.api_exception_handler"
    assert settings.SIMPLE_JWT["AUTH_TOKEN_CLASSES"] == ("ho_core.iam.tokens.StaffAccessToken",)


def test_log_records_get_request_id_and_redaction():
    filters = settings.LOGGING["filters"]
    assert filters["request_id"]["()"] == "ho_core.common.log_filters.RequestIdFilter"
    assert filters["sensitive"]["()"] == "ho_core.common.log_filters.SensitiveDataFilter"


@pytest.mark.django_db
def test_openapi_schema_lists_tenancy_endpoints(anon_client):
    r = anon_client.get("/api/schema/", HTTP_ACCEPT="application/vnd.oai.openapi+json")

    assert r.status_code == 200
    paths = r.json()["paths"]
    assert "/api/v1/session/context/" in paths
    assert "/api/v1/branches/current/" in paths
    assert "/api/v1/tenants/current/" in paths
    assert "/api/v1/audit-logs/" in paths
    assert "/api/v1/users/{user_id}/branches/{branch_id}/" in paths


@pytest.mark.django_db
def test_anonymous_api_calls_are_rejected(anon_client):
    r = anon_client.get("/api/v1/branches/")

    assert r.status_code == 401
    assert r.data["error"]["code"] == "not_authenticated"
