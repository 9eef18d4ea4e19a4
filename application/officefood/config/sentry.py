import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

import logging

# Logger
from officefood.logging.utils import get_app_logger
logger = get_app_logger("sentry")

# Settings
from officefood.config.settings import OfficeFoodConfigs
configs = OfficeFoodConfigs()

SENSITIVE_HEADERS = ['authorization', 'cookie', 'x-api-key']
SENSITIVE_FIELDS = ['code', 'otp', 'token', 'refreshtoken', 'secret']


def init_sentry():
    """Initialize Sentry SDK when SENTRY_ENABLED is set and a DSN is configured"""

    if not configs.SENTRY_ENABLED:
        logger.info("Sentry monitoring is disabled")
        return

    if not configs.SENTRY_DSN:
        logger.warning("SENTRY_ENABLED is true but SENTRY_DSN is not configured")
        return

    sentry_sdk.init(
        dsn=configs.SENTRY_DSN,
        environment=configs.ENVIRONMENT,
        release=configs.SENTRY_RELEASE,
        traces_sample_rate=float(configs.SENTRY_TRACES_SAMPLE_RATE),
        profiles_sample_rate=float(configs.SENTRY_PROFILES_SAMPLE_RATE),
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(
                level=logging.INFO,        # breadcrumbs
                event_level=logging.ERROR  # events
            ),
        ],
        send_default_pii=False,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        before_send=before_send_filter,
    )

    logger.info(f"Sentry initialized successfully for environment: {configs.ENVIRONMENT}")


def before_send_filter(event, hint):
    """Strip credentials and OTP codes before the event leaves the process"""
    request = event.get('request') or {}

    headers = request.get('headers')
    if isinstance(headers, dict):
        for header in list(headers.keys()):
            if header.lower() in SENSITIVE_HEADERS:
                headers[header] = '[Filtered]'

    data = request.get('data')
    if isinstance(data, dict):
        for key in list(data.keys()):
            if any(field in key.lower() for field in SENSITIVE_FIELDS):
                data[key] = '[Filtered]'

    return event


def capture_exception(exception, **kwargs):
    """Send the exception to Sentry when enabled; it is always logged locally"""
    if configs.SENTRY_ENABLED:
        sentry_sdk.capture_exception(exception, **kwargs)
    logger.error(f"Exception occurred: {exception}", exc_info=True)


def add_breadcrumb(message, category="custom", level="info", data=None):
    if configs.SENTRY_ENABLED:
        sentry_sdk.add_breadcrumb(
            message=message,
            category=category,
            level=level,
            data=data or {}
        )
