"""Structlog configuration for the authorizer.

Configures structlog with colored console output for development
and JSON output for production (e.g. CloudWatch).
"""

import os
import sys

import structlog

from infrastructure.settings import AuthorizerSettings, get_authorizer_settings


def _use_json_output(settings: AuthorizerSettings) -> bool:
    if settings.log_json is not None:
        return settings.log_json
    # FORCE_COLOR=1 enables colors even in non-TTY environments (like Docker)
    force_color = os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes")
    return not (force_color or sys.stdout.isatty())


def configure_logging(settings: AuthorizerSettings | None = None) -> None:
    """Configure structlog with appropriate processors.

    Args:
        settings: Settings to read the log level and output format from.
            Defaults to the cached environment settings.
    """
    settings = settings or get_authorizer_settings()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if _use_json_output(settings):
        processors: list[structlog.types.Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.log_level_number),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
