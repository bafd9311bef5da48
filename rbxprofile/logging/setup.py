"""Structlog configuration for rbxprofile."""

import logging
import sys

import structlog

from rbxprofile.config import AggregatorConfig, LogFormat


SERVICE_NAME = "rbxprofile"


def add_service(logger, method_name: str, event_dict: dict) -> dict:
    """Tag every event with the service name."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def round_timings(logger, method_name: str, event_dict: dict) -> dict:
    """Round ``*_ms`` fields to 0.1 ms and ``*_seconds`` fields to 1 ms."""
    for key, value in event_dict.items():
        if not isinstance(value, float):
            continue
        if key.endswith("_ms"):
            event_dict[key] = round(value, 1)
        elif key.endswith("_seconds"):
            event_dict[key] = round(value, 3)
    return event_dict


def configure_logging(config: AggregatorConfig | None = None) -> None:
    """
    Configure structlog with appropriate processors and output format.

    Args:
        config: AggregatorConfig instance, uses defaults if None
    """
    if config is None:
        config = AggregatorConfig()

    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        add_service,
        round_timings,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if config.log_format == LogFormat.JSON:
        processors.extend([
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ])
    else:
        processors.extend([
            structlog.dev.set_exc_info,
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """
    Get a configured structlog logger.

    Args:
        name: Optional logger name for context

    Returns:
        Configured structlog BoundLogger
    """
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger_name=name)
    return logger


def bind_lookup(**fields):
    """
    Bind lookup identifiers (``username``, ``user_id``) to every event logged
    inside the block, including events from tasks started within it.

    Example:
        with bind_lookup(username="builderman"):
            log.info("lookup_start")
    """
    return structlog.contextvars.bound_contextvars(**fields)
