"""Shared utilities for file gateway services."""

from shared.utils.logging import configure_logging, get_correlation_id, set_correlation_id
from shared.utils.metrics import MetricsMiddleware, create_counter, create_histogram

__all__ = [
    "configure_logging",
    "get_correlation_id",
    "set_correlation_id",
    "MetricsMiddleware",
    "create_counter",
    "create_histogram",
]
