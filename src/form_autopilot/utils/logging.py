"""Structured logging configuration using structlog."""

import logging
import sys
from typing import Any, Dict

import structlog
from rich.logging import RichHandler

from form_autopilot.config import settings


def configure_logging() -> None:
    """Configure structured logging with rich output."""

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
        handlers=[RichHandler(rich_tracebacks=True, markup=True)],
    )

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper())
        ),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_fill_plan(plan: Any) -> Dict[str, Any]:
    """Create a log context for a fill plan without leaking values."""
    entries = list(getattr(plan, "entries", plan) or [])
    return {
        "fill_plan": {
            "entries": len(entries),
            "selectors": [entry.selector for entry in entries],
            "value_lengths": [len(entry.value) for entry in entries],
        }
    }


def log_match_report(report: Any) -> Dict[str, Any]:
    """Create a log context for a matching report."""
    return {
        "match_report": {
            "total_fields": report.total_fields,
            "match_count": report.match_count,
            "confidence": round(report.confidence, 3),
        }
    }
