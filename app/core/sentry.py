"""Optional Sentry error tracking (enabled by SENTRY_DSN)."""

import logging

from app.core.config import settings

logger = logging.getLogger(__name__)

RELEASE = "faculty-eval-analytics@1.0.0"


def init_sentry() -> bool:
    """Initialize the SDK; returns False when no DSN is configured."""
    if not settings.sentry_dsn:
        logger.debug("Sentry disabled (no SENTRY_DSN)")
        return False

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.app_env,
        release=RELEASE,
        traces_sample_rate=settings.sentry_traces_sample_rate,
        # Evaluation comments are free text about people
        send_default_pii=False,
        max_request_body_size="never",
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
    )
    sentry_sdk.set_tag("service", "faculty-analytics")
    logger.info("Sentry initialized (env=%s, traces=%.2f)", settings.app_env, settings.sentry_traces_sample_rate)
    return True
