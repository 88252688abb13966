"""Correlation ID management for request tracing."""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_ID_HEADER = "X-Correlation-ID"

# Longer incoming values are replaced, not truncated.
_MAX_INCOMING_LENGTH = 128


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_correlation_id() -> str:
    return correlation_id_var.get()


def accept_correlation_id(incoming: str | None) -> str:
    """Use the caller's correlation ID if it is sane, else generate one."""
    if incoming and len(incoming) <= _MAX_INCOMING_LENGTH and incoming.isprintable():
        return incoming
    return generate_correlation_id()


@contextmanager
def correlation_scope(cid: str) -> Iterator[str]:
    """Bind a correlation ID for the duration of a request or job."""
    token = correlation_id_var.set(cid)
    try:
        yield cid
    finally:
        correlation_id_var.reset(token)
