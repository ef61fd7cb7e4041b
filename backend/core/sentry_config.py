"""
Sentry SDK setup.

Sentry stays off unless SENTRY_DSN is set. Reporter and author identities are
moderation-sensitive, so events are stripped down to the user id before they
leave the process.
"""

import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.types import Event, Hint

HEALTH_PATHS = ("/health", "/api/health")
_USER_PII_KEYS = ("email", "username", "full_name")


def _before_send(event: Event, hint: Hint) -> Event | None:
    """
    Remove personal data from an error event.

    Args:
        event: Sentry event.
        hint: Extra context supplied by the SDK.

    Returns:
        The scrubbed event.
    """
    user = event.get("user")
    if user:
        for key in _USER_PII_KEYS:
            user.pop(key, None)
        if "ip_address" in user:
            user["ip_address"] = "{{auto}}"

    request = event.get("request")
    if request and isinstance(request, dict):
        request.pop("cookies", None)
        # Report descriptions are free text written by residents
        request.pop("data", None)
        headers = request.get("headers")
        if isinstance(headers, dict) and "Authorization" in headers:
            headers["Authorization"] = "[Filtered]"

    return event


def _before_send_transaction(event: Event, hint: Hint) -> Event | None:
    """Drop health check transactions."""
    transaction_name = event.get("transaction", "")
    if any(transaction_name.endswith(path) for path in HEALTH_PATHS):
        return None
    return event


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """
    Pick a trace sample rate for a request.

    Moderation writes are rare and worth tracing in full; list traffic is
    sampled.
    """
    if sampling_context.get("parent_sampled") is True:
        return 1.0

    asgi_scope = sampling_context.get("asgi_scope", {})
    path = asgi_scope.get("path", "")
    method = asgi_scope.get("method", "GET")

    if path in HEALTH_PATHS:
        return 0.0

    if path.endswith("/resolve"):
        return 1.0

    if path.startswith("/api/reports") and method != "GET":
        return 0.5

    return 0.2


def init_sentry() -> None:
    """
    Initialize Sentry if SENTRY_DSN is configured.

    Must run before the FastAPI app is created.
    """
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=os.getenv("SENTRY_RELEASE", "unknown"),
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoguruIntegration(),
        ],
        traces_sampler=_traces_sampler,
        sample_rate=1.0,
        before_send=_before_send,
        before_send_transaction=_before_send_transaction,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[KeyboardInterrupt, SystemExit],
    )
