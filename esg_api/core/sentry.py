"""Sentry error reporting for the ESG API."""

import structlog
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

logger = structlog.get_logger()

_REDACTED = "[REDACTED]"
_SENSITIVE_HEADERS = frozenset({"authorization", "cookie"})
# Auth request bodies: register, login and profile updates
_SENSITIVE_FIELDS = frozenset({"password", "currentPassword", "newPassword", "token"})


def _scrub_event(event: dict, hint: dict) -> dict:
    """Strip bearer tokens and passwords from the captured request."""
    request = event.get("request") or {}

    headers = request.get("headers") or {}
    for name in list(headers):
        if name.lower() in _SENSITIVE_HEADERS:
            headers[name] = _REDACTED

    body = request.get("data")
    if isinstance(body, dict):
        for key in _SENSITIVE_FIELDS.intersection(body):
            body[key] = _REDACTED

    return event


def init_sentry(
    dsn: str | None,
    environment: str = "development",
    release: str | None = None,
) -> None:
    """Hook Sentry into FastAPI and SQLAlchemy; must run before the app is built.

    Does nothing without a DSN, so local runs and tests stay offline.
    """
    if not dsn:
        logger.info("sentry_disabled", reason="SENTRY_DSN not set")
        return

    sample_rate = 0.1 if environment == "production" else 1.0
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=sample_rate,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        send_default_pii=False,
        before_send=_scrub_event,
    )
    sentry_sdk.set_tag("service", "esg-api")
    logger.info("sentry_initialized", environment=environment, traces_sample_rate=sample_rate)
