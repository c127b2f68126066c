"""Structured logging with request context propagation."""

import json
import sys
import time
import traceback
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TextIO


# Context variables for log correlation
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_user_id: ContextVar[Optional[str]] = ContextVar("user_id", default=None)


class LogLevel(Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class LogEvent:
    """Structured log event."""

    level: str
    message: str
    timestamp: float = field(default_factory=time.time)
    logger: str = "catalog_security"

    # Context
    request_id: Optional[str] = None
    user_id: Optional[str] = None

    # Additional fields
    extra: Dict[str, Any] = field(default_factory=dict)

    # Error info
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    stack_trace: Optional[str] = None

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "level": self.level,
            "message": self.message,
            "timestamp": self.timestamp,
            "logger": self.logger,
        }

        if self.request_id:
            result["request_id"] = self.request_id
        if self.user_id:
            result["user_id"] = self.user_id
        if self.extra:
            result.update(self.extra)
        if self.error_type:
            result["error"] = {
                "type": self.error_type,
                "message": self.error_message,
                "stack_trace": self.stack_trace,
            }

        return result

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), default=str)


class StructuredLogger:
    """
    Structured logger with JSON output and context propagation.

    Security decisions are logged here so that programming errors and
    suppressed observation failures stay visible without reaching the
    end user.
    """

    def __init__(
        self,
        name: str = "catalog_security",
        level: LogLevel = LogLevel.INFO,
        json_output: bool = True,
        stream: Optional[TextIO] = None,
    ):
        self.name = name
        self.level = level
        self.json_output = json_output
        self.stream = stream
        self._handlers: List[Callable[[LogEvent], None]] = []

    def _should_log(self, level: LogLevel) -> bool:
        """Check if level should be logged."""
        levels = list(LogLevel)
        return levels.index(level) >= levels.index(self.level)

    def _format(self, event: LogEvent) -> str:
        if self.json_output:
            return event.to_json()

        ctx = []
        if event.request_id:
            ctx.append(f"req={event.request_id[:8]}")
        if event.user_id:
            ctx.append(f"user={event.user_id[:8]}")

        ctx_str = f"[{' '.join(ctx)}] " if ctx else ""
        output = f"{event.level} | {ctx_str}{event.message}"
        if event.extra:
            output += f" | {event.extra}"
        return output

    def _emit(self, event: LogEvent):
        """Emit log event."""
        print(self._format(event), file=self.stream or sys.stdout, flush=True)

        # A failing handler must not break the caller
        for handler in self._handlers:
            try:
                handler(event)
            except Exception:
                pass

    def _log(self, level: LogLevel, message: str, exception: Optional[BaseException] = None, **kwargs):
        if not self._should_log(level):
            return

        event = LogEvent(
            level=level.value,
            message=message,
            logger=self.name,
            request_id=_request_id.get(),
            user_id=_user_id.get(),
            extra=kwargs,
        )

        if exception is not None:
            event.error_type = type(exception).__name__
            event.error_message = str(exception)
            event.stack_trace = "".join(
                traceback.format_exception(type(exception), exception, exception.__traceback__)
            )

        self._emit(event)

    def add_handler(self, handler: Callable[[LogEvent], None]):
        """Add a log handler."""
        self._handlers.append(handler)

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, exception: Optional[BaseException] = None, **kwargs):
        """Log warning message."""
        self._log(LogLevel.WARNING, message, exception, **kwargs)

    def error(self, message: str, exception: Optional[BaseException] = None, **kwargs):
        """Log error message."""
        self._log(LogLevel.ERROR, message, exception, **kwargs)

    def critical(self, message: str, exception: Optional[BaseException] = None, **kwargs):
        """Log critical message."""
        self._log(LogLevel.CRITICAL, message, exception, **kwargs)


# Global logger instance
_logger: Optional[StructuredLogger] = None


def setup_structured_logging(
    name: str = "catalog_security",
    level: LogLevel = LogLevel.INFO,
    json_output: bool = True,
    stream: Optional[TextIO] = None,
) -> StructuredLogger:
    """
    Setup structured logging.

    Args:
        name: Logger name
        level: Minimum log level
        json_output: Use JSON format
        stream: Output stream, stdout when omitted

    Returns:
        Configured logger
    """
    global _logger
    _logger = StructuredLogger(name, level, json_output, stream)
    return _logger


def get_logger() -> StructuredLogger:
    """Get the global logger instance, configured from settings on first use."""
    global _logger
    if _logger is None:
        from catalog_security.config import settings

        _logger = StructuredLogger(
            level=LogLevel(settings.log_level.upper()),
            json_output=settings.log_json,
        )
    return _logger


def set_request_context(
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
):
    """Set logging context for the current request."""
    if request_id:
        _request_id.set(request_id)
    if user_id:
        _user_id.set(user_id)


def clear_request_context():
    """Clear logging context."""
    _request_id.set(None)
    _user_id.set(None)
