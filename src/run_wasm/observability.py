"""Structured logging for run-wasm.

This module provides:
- structlog configuration for the command line entry points
- A ``step`` context manager that logs start/end/duration of a pipeline step
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def configure_logging(level: str = "warning") -> None:
    """Configure structlog to render human-readable events on stderr.

    stdout is reserved for console output, so log events go to stderr and
    below-threshold events are dropped by the bound logger itself.

    Args:
        level: Minimum level name (debug, info, warning, error, critical).

    Raises:
        ValueError: If the level name is unknown.
    """
    normalized = level.lower()
    if normalized not in LOG_LEVELS:
        raise ValueError(f"Unknown log level '{level}'. Expected one of: {', '.join(LOG_LEVELS)}")

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(normalized.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


@contextmanager
def step(name: str, **context: Any) -> Iterator[structlog.typing.FilteringBoundLogger]:
    """Log the start and end of a pipeline step with its duration.

    Args:
        name: Step name (e.g., "compile", "bindgen").
        **context: Key/value pairs bound to every event of the step.

    Yields:
        Logger bound with the step name and context.

    Example:
        >>> with step("compile", unit="demo") as log:
        ...     log.debug("cargo_args", args=["build"])
    """
    log = structlog.get_logger(__name__).bind(step=name, **context)
    log.info(f"{name}_started")
    start = time.monotonic()
    try:
        yield log
    except Exception:
        log.warning(f"{name}_failed", duration_ms=int((time.monotonic() - start) * 1000))
        raise
    log.info(f"{name}_finished", duration_ms=int((time.monotonic() - start) * 1000))
