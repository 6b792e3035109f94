"""Centralized logging configuration with structlog.

Crawler nodes log JSON lines; local runs get the colored console renderer.
Every entry carries the application name, the instance role when one is
configured, and the page context bound by ``src.observability.tracing``.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor

APP_NAME = "amazon_crawl_dispatch"

QUIET_LOGGERS = ("urllib3", "bs4", "prometheus_client")


def app_context_processor(instance_role: str | None = None) -> Processor:
    """Build a processor stamping the app name and instance role on entries."""

    def add_app_context(
        logger: logging.Logger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict["app"] = APP_NAME
        if instance_role:
            event_dict.setdefault("instance_role", instance_role)
        return event_dict

    return add_app_context


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    instance_role: str | None = None,
) -> None:
    """Configure structlog on top of the stdlib root logger.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
        json_logs: Render JSON lines instead of the console format
        instance_role: Role of this crawler node (prod, dev, test)
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        app_context_processor(instance_role),
    ]

    if json_logs:
        processors.extend(
            [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        )
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structured logger for a module, e.g. ``get_logger(__name__)``."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def bind_context(**kwargs: object) -> None:
    """Bind context variables for subsequent log entries of this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)
