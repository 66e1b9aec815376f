"""Structured logging configuration.

This module hands out structlog loggers with a stable JSON event format.
Library code logs events; it never configures handlers beyond structlog's
processor chain.
"""

from __future__ import annotations

from typing import Any

import structlog

_CONFIGURED = False


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured output.
    """
    global _CONFIGURED
    if not _CONFIGURED and not structlog.is_configured():
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.JSONRenderer(sort_keys=True),
            ],
            cache_logger_on_first_use=True,
        )
    _CONFIGURED = True
    return structlog.get_logger(name)
