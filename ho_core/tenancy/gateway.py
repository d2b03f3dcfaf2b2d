# ho_core/tenancy/gateway.py
"""
Scoped execution: database work that runs under a tenant's RLS context.

PostgreSQL policies (see tenancy/migrations/0001_rls_policies.py) read three
session settings. They are written with set_config(..., is_local => true), so
they live exactly as long as the current transaction. Pooled connections are
reused across requests, which is why nothing here ever writes them outside an
open transaction.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, TypeVar

from django.db import DEFAULT_DB_ALIAS, DatabaseError, connections, transaction

from ho_core.common.api.exceptions import ConfigurationFailure
from ho_core.tenancy.context import TenantContext, get_context

logger = logging.getLogger(__name__)

T = TypeVar("T")

TENANT_SETTING = "app.current_tenant_id"
BRANCH_SETTING = "app.current_branch_id"
USER_SETTING = "app.current_user_id"

SESSION_SETTINGS = (TENANT_SETTING, BRANCH_SETTING, USER_SETTING)

CONFIGURE_SQL = "SELECT set_config(%s, %s, true), set_config(%s, %s, true), set_config(%s, %s, true)"
READ_SQL = (
    "SELECT NULLIF(current_setting(%s, true), ''), "
    "NULLIF(current_setting(%s, true), ''), "
    "NULLIF(current_setting(%s, true), '')"
)


def configure_session(executor, context: TenantContext) -> None:
    """
    Applies tenant, branch and user ids as transaction-local settings on `executor`
    (a Django connection wrapper) in a single parameterised statement.

    An unset branch is written as '' so a branch applied earlier in the same
    transaction cannot survive into this scope.
    """
    if not isinstance(context, TenantContext):
        raise TypeError(f"configure_session() requires a TenantContext, got {type(context).__name__}")

    if not getattr(executor, "in_atomic_block", False):
        logger.error(
            "Refusing to configure tenant scope outside a transaction tenant=%s alias=%s",
            context.tenant_id,
            getattr(executor, "alias", None),
        )
        raise ConfigurationFailure()

    params = [
        TENANT_SETTING, context.tenant_id,
        BRANCH_SETTING, context.branch_id or "",
        USER_SETTING, context.user_id,
    ]
    try:
        with executor.cursor() as cursor:
            cursor.execute(CONFIGURE_SQL, params)
    except DatabaseError as exc:
        logger.exception("Failed to apply tenant session settings tenant=%s", context.tenant_id)
        raise ConfigurationFailure() from exc

    logger.debug(
        "Tenant scope applied tenant=%s branch=%s user=%s",
        context.tenant_id,
        context.branch_id,
        context.user_id,
    )


def read_session(executor) -> dict[str, Optional[str]]:
    """
    Settings as the current transaction sees them; unset or empty -> None.
    """
    with executor.cursor() as cursor:
        cursor.execute(READ_SQL, list(SESSION_SETTINGS))
        row = cursor.fetchone()
    return dict(zip(SESSION_SETTINGS, row))


@dataclass(frozen=True)
class ScopedTransaction:
    """
    Handle given to a unit of work: the context it runs under and the
    configured connection. ORM calls made inside the unit use the same
    connection and transaction.
    """
    context: TenantContext
    using: str = DEFAULT_DB_ALIAS

    @property
    def connection(self):
        return connections[self.using]

    def cursor(self):
        return self.connection.cursor()


@contextmanager
def scoped_transaction(context: TenantContext, *, using: str = DEFAULT_DB_ALIAS) -> Iterator[ScopedTransaction]:
    """
    Opens a transaction (a savepoint when one is already open), configures it for
    `context` before anything else runs, and yields the handle.
    Commits on normal exit; any exception rolls back the work and the settings together.
    """
    with transaction.atomic(using=using):
        configure_session(connections[using], context)
        yield ScopedTransaction(context=context, using=using)


def run_scoped(request, unit_of_work: Callable[[ScopedTransaction], T], *, using: str = DEFAULT_DB_ALIAS) -> T:
    """
    The sanctioned way for handlers to run tenant-scoped database work.

    Raises NotAuthenticated (before any transaction is opened) if the request was
    never bound, ConfigurationFailure if the scope cannot be applied.
    """
    context = get_context(request)
    with scoped_transaction(context, using=using) as tx:
        return unit_of_work(tx)
