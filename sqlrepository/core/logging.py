from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional


# Context variables for enriched logging
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
operation_var: ContextVar[Optional[str]] = ContextVar("operation", default=None)


class LoggingContextFilter(logging.Filter):
    """
    Logging filter that injects correlation_id and operation from contextvars
    into each log record so formatters can include them.

    If no values are present in the context, placeholders are used.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        cid = correlation_id_var.get()
        op = operation_var.get()
        setattr(record, "correlation_id", cid or "-")
        setattr(record, "operation", op or "-")
        return True


# PUBLIC_INTERFACE
@contextmanager
def operation_context(operation: str) -> Iterator[None]:
    """
    Context manager that tags log records emitted inside the block with
    the given operation name (select/insert/update/delete).
    """
    token = operation_var.set(operation)
    try:
        yield
    finally:
        operation_var.reset(token)


# PUBLIC_INTERFACE
def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging with a structured format and context filter."""
    handler = logging.StreamHandler(stream=sys.stdout)
    fmt = (
        "%(asctime)s | %(levelname)s | %(name)s | cid=%(correlation_id)s | op=%(operation)s | "
        "%(message)s"
    )
    formatter = logging.Formatter(fmt=fmt)
    handler.setFormatter(formatter)
    handler.addFilter(LoggingContextFilter())

    root = logging.getLogger()
    # Remove pre-existing default handlers configured elsewhere (e.g., basicConfig)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(level)
