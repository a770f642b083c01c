"""Structured logging setup."""

import logging
import sys

import structlog

from leakscope.core.config import get_settings

ROOT_LOGGER = "leakscope"


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Route structlog events through the ``leakscope`` stdlib logger."""
    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    fmt = log_format or settings.log_format
    log_level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger = logging.getLogger(ROOT_LOGGER)
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(log_level)
    package_logger.propagate = False

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Get a logger bound to a component name."""
    logger_name = name if name.startswith(ROOT_LOGGER) else f"{ROOT_LOGGER}.{name}"
    return structlog.get_logger(logger_name, component=name)


def redact(value: str | None) -> str:
    """Shorten a credential for log output (first and last few chars)."""
    if not value:
        return ""
    if len(value) > 10:
        return value[:4] + "..." + value[-4:]
    return value[:2] + "..."
