"""Per-collection request IDs, carried through logging via a context variable."""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    """Get current request ID from context ("" outside a request)."""
    return request_id_var.get("")


@contextmanager
def request_scope(request_id: Optional[str] = None) -> Iterator[str]:
    """
    Bind a request ID for the duration of one collection request.

    Nested scopes keep the outer ID, so a collector calling another collector
    method logs under a single request.
    """
    current = request_id_var.get("")
    if current and request_id is None:
        yield current
        return

    token = request_id_var.set(request_id or uuid.uuid4().hex[:12])
    try:
        yield request_id_var.get()
    finally:
        request_id_var.reset(token)


class RequestIdFilter(logging.Filter):
    """Stamp every log record with the active request ID."""

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = get_request_id()
        if request_id:
            record.request_id = request_id
        return True
