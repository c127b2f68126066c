"""Pytest configuration and shared fixtures."""

import io

import pytest


@pytest.fixture
def registry():
    """Fresh metrics registry per test."""
    from catalog_security.observability.metrics import MetricsRegistry

    return MetricsRegistry()


@pytest.fixture
def log_stream():
    """In-memory stream receiving structured log lines."""
    return io.StringIO()


@pytest.fixture
def captured_events():
    """List collecting every LogEvent emitted by the test logger."""
    return []


@pytest.fixture
def structured_logger(log_stream, captured_events):
    """Structured logger writing to memory instead of stdout."""
    from catalog_security.observability.logging import LogLevel, StructuredLogger

    logger = StructuredLogger(name="test", level=LogLevel.DEBUG, stream=log_stream)
    logger.add_handler(captured_events.append)
    return logger


@pytest.fixture
def monitor(registry, structured_logger):
    """Security monitor with isolated counters and logger."""
    from catalog_security.security.monitor import SecurityMonitor

    return SecurityMonitor(registry=registry, logger=structured_logger)


@pytest.fixture
def sample_user():
    """Sample authenticated editor."""
    return {
        "id": "user-123",
        "email": "editor@example.com",
        "role": "editor",
    }
