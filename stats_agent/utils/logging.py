"""Structured logging utilities using structlog for run context and tracing."""

import os
import sys
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from structlog.processors import JSONRenderer
from structlog.contextvars import bound_contextvars, merge_contextvars

IS_TTY = sys.stderr.isatty()
LOG_FORMAT = os.getenv("LOG_FORMAT", "console").lower()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_structured_logging() -> None:
    """
    Configure structlog processors and renderer.

    Uses:
    - Console renderer for development (colorized, human-readable)
    - JSON renderer for production (structured, machine-readable)
    - Context variables for the run correlation id
    """
    processors = [
        merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if IS_TTY and LOG_FORMAT == "console":
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    else:
        processors.append(JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_structured_logger(
    name: str,
    component: Optional[str] = None,
    **additional_context: Any,
) -> structlog.BoundLogger:
    """
    Get a structured logger with bound context.

    Example:
        >>> logger = get_structured_logger(__name__, component="OrchestrationEngine")
        >>> logger.info("attempt_started", attempt=1, requested=10)
    """
    logger = structlog.get_logger(name)
    if component:
        logger = logger.bind(component=component)
    if additional_context:
        logger = logger.bind(**additional_context)
    return logger


def get_correlation_id() -> str:
    """Generate a correlation id for one orchestration run."""
    return str(uuid.uuid4())


@contextmanager
def run_context(run_id: str, topic: str) -> Iterator[None]:
    """
    Attach run_id and topic to every structlog event emitted inside the block.

    Bound through context variables, so collaborator clients called by the
    engine log the same run_id without it being passed down. Concurrent runs
    in separate asyncio tasks do not see each other's context.

    Example:
        >>> with run_context(get_correlation_id(), "climate change"):
        ...     logger.info("attempt_started", attempt=1)
    """
    with bound_contextvars(run_id=run_id, topic=topic[:80]):
        yield


configure_structured_logging()


__all__ = [
    "get_structured_logger",
    "get_correlation_id",
    "run_context",
    "configure_structured_logging",
]
