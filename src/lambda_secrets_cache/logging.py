"""
Structured logging configuration for the parameter and secret cache.

Uses structlog for structured, context-aware logging with:
- JSON output for production (CloudWatch)
- Pretty console output for development
- Refresh timing
- Lambda invocation context (request ID, function name)

Cached values are never passed to the logger; only names, kinds and statuses.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Generator

import structlog
from structlog.types import Processor

from .config import get_settings


def get_request_id() -> str | None:
    """Get the current Lambda request ID from the bound log context."""
    return structlog.contextvars.get_contextvars().get('request_id')


def get_function_name() -> str | None:
    """Get the current Lambda function name from the bound log context."""
    return structlog.contextvars.get_contextvars().get('function_name')


def configure_logging(
    json_output: bool = False,
    log_level: str | None = None,
) -> None:
    """
    Configure structlog for the application.

    Args:
        json_output: If True, output JSON logs (for production).
                    If False, output pretty console logs (for development).
        log_level: Override log level (defaults to LOG_LEVEL setting)
    """
    level = log_level or get_settings().LOG_LEVEL
    level_num = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format='%(message)s',
        stream=sys.stdout,
        level=level_num,
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


@contextmanager
def logging_context(
    request_id: str | None = None,
    function_name: str | None = None,
) -> Generator[None, None, None]:
    """
    Bind invocation data into structlog's context variables.

    merge_contextvars adds the bound values to every log entry; previous
    values are restored on exit.

    Usage:
        with logging_context(request_id=context.aws_request_id):
            logger.info("handler.started")  # Includes request_id
    """
    bindings = {
        key: value
        for key, value in (('request_id', request_id), ('function_name', function_name))
        if value is not None
    }
    with structlog.contextvars.bound_contextvars(**bindings):
        yield


class RefreshTimer:
    """
    Wall-clock timer for a refresh and its individual fetch attempts.

    Usage:
        timer = RefreshTimer()
        with timer.attempt():
            payload = await transport.fetch(path)
        logger.info("entry.refreshed", **timer.summary())
    """

    def __init__(self):
        self.attempts: list[float] = []
        self.start_time: float = time.perf_counter()

    @contextmanager
    def attempt(self) -> Generator[None, None, None]:
        """Time a single fetch attempt."""
        started = time.perf_counter()
        try:
            yield
        finally:
            self.attempts.append((time.perf_counter() - started) * 1000)

    @property
    def total_ms(self) -> float:
        """Total elapsed time since timer creation in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000

    def summary(self) -> dict[str, Any]:
        """Get timing summary as a dictionary."""
        return {
            'total_ms': round(self.total_ms, 2),
            'attempts': len(self.attempts),
            'attempt_ms': [round(ms, 2) for ms in self.attempts],
        }


# Development mode by default; Lambda deployments set LOG_JSON=true
configure_logging(json_output=get_settings().LOG_JSON)
