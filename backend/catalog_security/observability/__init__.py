"""Observability module: counters and structured logging."""

from catalog_security.observability.metrics import (
    Counter,
    MetricValue,
    MetricsRegistry,
)
from catalog_security.observability.logging import (
    LogEvent,
    LogLevel,
    StructuredLogger,
    setup_structured_logging,
    get_logger,
    set_request_context,
    clear_request_context,
)

__all__ = [
    "Counter",
    "MetricValue",
    "MetricsRegistry",
    "LogEvent",
    "LogLevel",
    "StructuredLogger",
    "setup_structured_logging",
    "get_logger",
    "set_request_context",
    "clear_request_context",
]
