"""Observability module for structured logging."""

from repofetch.observability.logging import configure_logging, get_logger


__all__ = [
    "configure_logging",
    "get_logger",
]
