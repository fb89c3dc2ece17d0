"""
Structured logging utilities with JSON output for deployed environments.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

_RESERVED_KWARGS = ("exc_info", "stack_info", "stacklevel")


class JSONFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def __init__(self, service_name: str = "shiptrack"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "severity": record.levelname,
            "message": record.getMessage(),
            "service": self.service_name,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        context = getattr(record, "context", None)
        if context:
            log_entry.update(context)

        return json.dumps(log_entry, default=str)


class StructuredLogger(logging.Logger):
    """
    Logger that accepts keyword context alongside the message.

    ``logger.info("Shipment dispatched", shipment_id="S1")`` attaches
    ``shipment_id`` to the record under ``record.context``.
    """

    def _log_with_context(self, level: int, msg: str, *args, **kwargs: Any) -> None:
        if not self.isEnabledFor(level):
            return

        extra = dict(kwargs.pop("extra", None) or {})
        context = {k: v for k, v in kwargs.items() if k not in _RESERVED_KWARGS}
        if context:
            extra["context"] = context

        log_kwargs = {k: v for k, v in kwargs.items() if k in _RESERVED_KWARGS}
        log_kwargs["extra"] = extra

        self._log(level, msg, args, **log_kwargs)

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._log_with_context(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._log_with_context(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._log_with_context(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self._log_with_context(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs) -> None:
        self._log_with_context(logging.CRITICAL, msg, *args, **kwargs)


class ContextFormatter(logging.Formatter):
    """Plain text formatter that appends keyword context as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, "context", None)
        if context:
            line += " " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


def setup_logging(
    service_name: str = "shiptrack",
    log_level: str = "INFO",
    use_json: bool = True,
) -> None:
    """
    Set up logging configuration.

    Args:
        service_name: Name of the service for log entries
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_json: Whether to use JSON formatting (False for local dev)
    """
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if use_json:
        handler.setFormatter(JSONFormatter(service_name=service_name))
    else:
        handler.setFormatter(ContextFormatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
    root_logger.addHandler(handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger instance.

    The logger class is swapped only for the duration of the lookup so
    third-party loggers keep the standard class.

    Args:
        name: Logger name (typically __name__)

    Returns:
        StructuredLogger instance
    """
    previous = logging.getLoggerClass()
    logging.setLoggerClass(StructuredLogger)
    try:
        return logging.getLogger(name)  # type: ignore[return-value]
    finally:
        logging.setLoggerClass(previous)
