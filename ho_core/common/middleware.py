from __future__ import annotations

import logging

from django.utils.deprecation import MiddlewareMixin

from ho_core.common.api.exceptions import ensure_request_id
from ho_core.common.log_filters import current_request_id
from ho_core.tenancy.context import attach_context

logger = logging.getLogger(__name__)


class RequestContextMiddleware(MiddlewareMixin):
    """
    Per-request bookkeeping for tenant scoping.

    Behavior:
      - Honors an incoming X-Request-Id, otherwise generates one; echoed on the response.
      - Publishes the request id to log records.
      - Resets request.tenant_context to None so nothing bound for an earlier
        request can be read by this one. Binding happens later, in DRF permissions
        (ho_core.tenancy.permissions), once JWT authentication has run.
    """

    REQUEST_ID_META_KEY = "HTTP_X_REQUEST_ID"
    MAX_REQUEST_ID_LENGTH = 64

    def process_request(self, request):
        incoming = (request.META.get(self.REQUEST_ID_META_KEY) or "").strip()
        if incoming and len(incoming) <= self.MAX_REQUEST_ID_LENGTH:
            request.request_id = incoming

        rid = ensure_request_id(request)
        current_request_id.set(rid)
        attach_context(request, None)
        return None

    def process_response(self, request, response):
        rid = getattr(request, "request_id", None)
        if rid:
            response["X-Request-Id"] = rid

        context = getattr(request, "tenant_context", None)
        logger.debug(
            "%s %s -> %s tenant=%s branch=%s",
            request.method,
            getattr(request, "path", ""),
            response.status_code,
            getattr(context, "tenant_id", None),
            getattr(context, "branch_id", None),
        )

        current_request_id.set("-")
        return response
