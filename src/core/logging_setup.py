"""Structured logging configuration using structlog."""

from __future__ import annotations

import sys

import structlog

from core.config import AppSettings

_LEVELS = {"debug": 10, "info": 20, "warning": 30, "warn": 30, "error": 40, "critical": 50}


def configure_logging(settings: AppSettings | None = None) -> None:
    """Configure structlog for the CLI and the pipeline.

    Console renderer for interactive use, JSON for pipelines. Logs go to stderr
    so `--json` output on stdout stays machine readable.
    """

    settings = settings or AppSettings()
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    log_level = _LEVELS.get(settings.log_level.lower(), 30)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

