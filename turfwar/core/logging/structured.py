"""
Structured JSON Logger
======================

Обёртка над стандартным logging: одна JSON-запись на событие.

Output:
    {
        "timestamp": "2026-10-19T15:30:45.123456+00:00",
        "level": "INFO",
        "component": "capture",
        "event": "capture.completed",
        "message": "Capture completed",
        "metadata": {"points": 5}
    }
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .events import LogEvent

ROOT_LOGGER_NAME = "turfwar"


class StructuredLogger:
    """
    JSON structured logger.

    Attributes:
        component: Имя компонента (например, "capture", "scoreboard")
        logger: Нижележащий logging.Logger (turfwar.<component>)

    Example:
        >>> logger = StructuredLogger("capture")
        >>> logger.info(
        ...     event=LogEvent.CAPTURE_STARTED,
        ...     message="Capture started",
        ... )
    """

    def __init__(
        self,
        component: str,
        level: Optional[int] = None,
        logger_name: Optional[str] = None
    ):
        """
        Args:
            component: Идентификатор компонента
            level: Уровень логгера (по умолчанию наследуется от "turfwar")
            logger_name: Имя логгера (по умолчанию turfwar.<component>)
        """
        self.component = component
        self.logger_name = logger_name or f"{ROOT_LOGGER_NAME}.{component}"
        self.logger = logging.getLogger(self.logger_name)
        if level is not None:
            self.logger.setLevel(level)

    def _log(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return

        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": logging.getLevelName(level),
            "component": self.component,
            "event": event.value,
            "message": message,
        }

        if metadata:
            log_entry["metadata"] = metadata

        if exc_info is not None:
            log_entry["exception"] = {
                "type": type(exc_info).__name__,
                "message": str(exc_info),
            }

        self.logger.log(
            level,
            json.dumps(log_entry, default=str),
            exc_info=exc_info if level >= logging.ERROR else None,
        )

    def debug(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        self._log(logging.DEBUG, event, message, metadata)

    def info(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        self._log(logging.INFO, event, message, metadata)

    def warning(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        self._log(logging.WARNING, event, message, metadata, exc_info)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Логирование уровня ERROR.

        Args:
            event: Типизированное событие
            message: Сообщение для человека
            metadata: Дополнительный контекст
            exc_info: Исключение (traceback уходит в handler)
        """
        self._log(logging.ERROR, event, message, metadata, exc_info)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)


class JSONFormatter(logging.Formatter):
    """
    Formatter для вывода уже сериализованных StructuredLogger записей.

    Сообщение StructuredLogger уже JSON: пропускается как есть.
    Traceback (exc_info у ERROR-записей) дописывается следующими строками.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = message + "\n" + self.formatException(record.exc_info)
        return message


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Подключение JSON stream handler к логгеру "turfwar" (один раз при старте).

    Returns:
        Корневой логгер пакета
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    if not any(isinstance(h.formatter, JSONFormatter) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
    return root


def create_logger(component: str, level: Optional[int] = None) -> StructuredLogger:
    """Factory для StructuredLogger."""
    return StructuredLogger(component=component, level=level)
