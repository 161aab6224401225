"""
Structured logging для turfwar.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    configure_logging: подключение JSON handler к логгеру "turfwar"
    create_logger: Factory function
"""

from .events import LogEvent
from .structured import JSONFormatter, StructuredLogger, configure_logging, create_logger

__all__ = [
    "LogEvent",
    "JSONFormatter",
    "StructuredLogger",
    "configure_logging",
    "create_logger",
]
