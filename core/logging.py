"""
Structured Logging Configuration

structlog setup for the pipelines. Every line written during a pipeline
run carries the run's correlation id, pipeline name and scope (the date or
season being processed), bound through structlog's contextvars so that
transformer modules can log without being handed the run.

Output is JSON for scheduled runs and a colored console format for local
backfills (LOG_FORMAT).
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.contextvars import bind_contextvars, unbind_contextvars


RUN_CONTEXT_KEYS = ("correlation_id", "pipeline", "scope")


def bind_run_context(run_id: str, pipeline: str, scope: Optional[str] = None) -> None:
    """Attach a pipeline run's identity to every log line in this context."""
    bind_contextvars(correlation_id=run_id, pipeline=pipeline, scope=scope)


def clear_run_context() -> None:
    unbind_contextvars(*RUN_CONTEXT_KEYS)


def add_service_info(service_name: str) -> structlog.typing.Processor:
    """Processor stamping the service name on every event."""

    def processor(
        logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def drop_empty_scope(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Runs without a scope yet (before tracking starts) omit the key."""
    if event_dict.get("scope") is None:
        event_dict.pop("scope", None)
    return event_dict


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = True,
    service_name: str = "gshl-data-platform",
) -> None:
    """
    Configure structlog for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON lines when True, console rendering otherwise
        service_name: Name stamped on every event
    """
    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        drop_empty_scope,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_service_info(service_name),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_logging_from_settings() -> None:
    """Configure logging from LOG_LEVEL, LOG_FORMAT and SERVICE_NAME."""
    from core.settings import settings

    setup_logging(
        log_level=settings.log_level,
        json_format=settings.log_format == "json",
        service_name=settings.service_name,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Get a logger, optionally tagged with the emitting component.

    Example:
        log = get_logger("team_day")
        log.debug("team_day_built", team_id=12, date="2025-01-04")
    """
    if name:
        return structlog.get_logger(component=name)
    return structlog.get_logger()
