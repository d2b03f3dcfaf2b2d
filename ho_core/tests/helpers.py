# ho_core/tests/helpers.py
import pytest
from django.db import connection


def branch_headers(branch):
    """
    Branch selection header as the DRF test client expects it (HTTP_ prefix).
    """
    return {"HTTP_X_BRANCH_ID": str(branch.id)}


def is_postgres() -> bool:
    return connection.vendor == "postgresql"


requires_postgres = pytest.mark.skipif(
    not is_postgres(),
    reason="transaction-local session settings need PostgreSQL (set DB_ENGINE)",
)
