# ho_core/common/log_filters.py
from __future__ import annotations

import logging
import re
from contextvars import ContextVar

# Request id of the request being served on this thread/task; set by
# RequestContextMiddleware, read by RequestIdFilter.
current_request_id: ContextVar[str] = ContextVar("current_request_id", default="-")

_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9\-_\.=]+", re.IGNORECASE)
_SECRET_KV_RE = re.compile(
    r"((?:password|password_hash|token|refresh_token|access_token|authorization|cookie|aadhaar|abha_number)"
    r"['\"]?\s*[:=]\s*['\"]?)[^\s'\",}]+",
    re.IGNORECASE,
)

REDACTED = "[REDACTED]"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = current_request_id.get()
        return True


class SensitiveDataFilter(logging.Filter):
    """
    Masks credentials and national health identifiers in rendered messages.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except Exception:
            return True

        redacted = _SECRET_KV_RE.sub(rf"\1{REDACTED}", _BEARER_RE.sub(rf"\1{REDACTED}", message))
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True
