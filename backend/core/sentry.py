"""
Sentry Error Tracking Configuration
Centralized Sentry SDK initialization for the intake backend.
"""

import logging
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from backend.core.config import settings

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = ("authorization", "cookie", "x-forwarded-for", "x-real-ip")


def before_send(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    """
    Process events before sending to Sentry.

    Submissions carry personal data, so request bodies are dropped and
    client address headers are redacted.
    """
    request = event.get("request")
    if request:
        request.pop("data", None)
        headers = request.get("headers") or {}
        for header in list(headers):
            if header.lower() in SENSITIVE_HEADERS:
                headers[header] = "[REDACTED]"

    return event


def init_sentry() -> bool:
    """
    Initialize Sentry SDK with FastAPI integration.

    Returns:
        bool: True if Sentry was initialized successfully, False otherwise.
    """
    if not settings.sentry_dsn:
        logger.info("Sentry DSN not configured, error tracking disabled")
        return False

    try:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.sentry_environment or settings.environment,
            release=f"fraqtiv-intake@{settings.app_version}",
            traces_sample_rate=settings.sentry_traces_sample_rate,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                StarletteIntegration(transaction_style="endpoint"),
                LoggingIntegration(
                    level=logging.INFO,
                    event_level=logging.ERROR,
                ),
            ],
            before_send=before_send,
            send_default_pii=False,
            max_breadcrumbs=50,
        )

        sentry_sdk.set_tag("service", "intake")
        logger.info(f"Sentry initialized (env={settings.sentry_environment or settings.environment})")
        return True

    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}")
        return False


def capture_exception(error: Exception, extra: dict[str, Any] | None = None) -> str | None:
    """
    Capture an exception and send to Sentry.

    Args:
        error: The exception to capture
        extra: Optional extra data to attach

    Returns:
        Event ID if captured, None otherwise
    """
    with sentry_sdk.push_scope() as scope:
        if extra:
            for key, value in extra.items():
                scope.set_extra(key, value)

        return sentry_sdk.capture_exception(error)
