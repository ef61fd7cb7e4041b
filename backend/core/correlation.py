"""
Request correlation IDs.

Every request gets a short ID that is attached to log records, Sentry events
and error responses so a moderator can quote it when something goes wrong.
"""

import uuid
from contextvars import ContextVar

CORRELATION_HEADER = "X-Correlation-ID"

# Request-scoped; empty string when no request is active
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """
    Generate a new correlation ID.

    Returns:
        8 lowercase hex characters.
    """
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    """Return the correlation ID of the current context, or ''."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """
    Bind a correlation ID to the current context.

    Args:
        correlation_id: ID received from the client or freshly generated.
    """
    correlation_id_var.set(correlation_id)
