from __future__ import annotations

import datetime as dt
import json
import logging
import os
import sys
from typing import Any

from loguru import logger as loguru_logger

UTC = dt.UTC

# Attributes every LogRecord carries; anything else came in through ``extra``.
_STANDARD_FIELDS = frozenset(
    {
        "args",
        "msg",
        "name",
        "levelno",
        "levelname",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "message",
    }
)

_RETRY_FIELDS = frozenset(
    {"attempt", "retry_count", "max_attempts", "total_attempts", "delay_seconds"}
)
_HTTP_FIELDS = frozenset({"provider", "endpoint", "status_code", "latency_ms", "model"})


class JsonFormatter(logging.Formatter):
    """JSON formatter that groups retry and HTTP fields passed via ``extra``."""

    def __init__(self, include_location: bool = True, include_process_info: bool = False):
        super().__init__()
        self.include_location = include_location
        self.include_process_info = include_process_info
        self.hostname = os.uname().nodename if hasattr(os, "uname") else "unknown"

    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "timestamp": dt.datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "hostname": self.hostname,
        }

        if self.include_location:
            base.update(
                {
                    "module": record.module,
                    "function": record.funcName,
                    "line": record.lineno,
                }
            )

        if self.include_process_info:
            base.update({"process": record.process, "thread": record.thread})

        if record.exc_info:
            base["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        retry_fields: dict[str, Any] = {}
        http_fields: dict[str, Any] = {}
        extra_fields: dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key.startswith("_") or key in _STANDARD_FIELDS or key in base:
                continue
            if key in _RETRY_FIELDS:
                retry_fields[key] = value
            elif key in _HTTP_FIELDS:
                http_fields[key] = value
            else:
                extra_fields[key] = value

        if retry_fields:
            base["retry"] = retry_fields
        if http_fields:
            base["http"] = http_fields
        if extra_fields:
            base["extra"] = extra_fields

        return json.dumps(
            base, ensure_ascii=False, default=self._json_serializer, separators=(",", ":")
        )

    def _json_serializer(self, obj: Any) -> str:
        """Fallback for values json cannot encode (timedelta, bytes, models)."""
        if isinstance(obj, dt.timedelta):
            return str(obj.total_seconds())
        if isinstance(obj, bytes):
            return f"<{len(obj)} bytes>"
        return str(obj)


class InterceptHandler(logging.Handler):
    """Forward stdlib records into loguru, keeping ``extra`` fields bound."""

    def emit(self, record: logging.LogRecord) -> None:
        level: int | str
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if not key.startswith("_") and key not in _STANDARD_FIELDS
        }
        loguru_logger.bind(**extra).opt(depth=6, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_json_logging(
    level: str = "INFO",
    *,
    use_loguru: bool = True,
    include_location: bool = True,
    log_file: str | None = None,
    max_file_size: str = "100 MB",
    retention: str = "30 days",
) -> None:
    """Configure JSON logging for the process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        use_loguru: Route stdlib logging through loguru's serialized sinks.
            When False a stdlib handler with :class:`JsonFormatter` is installed.
        include_location: Include module/function/line in stdlib JSON records.
        log_file: Optional file path for a rotating sink.
        max_file_size: Rotation size for the loguru file sink.
        retention: Retention period for the loguru file sink.
    """
    lvl = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(lvl)

    if use_loguru:
        loguru_logger.remove()
        loguru_logger.add(sys.stdout, level=level.upper(), serialize=True, backtrace=True)
        if log_file:
            loguru_logger.add(
                log_file,
                level=level.upper(),
                serialize=True,
                rotation=max_file_size,
                retention=retention,
                compression="gz",
                enqueue=True,
            )
        root.addHandler(InterceptHandler())
    else:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(JsonFormatter(include_location=include_location))
        root.addHandler(console_handler)

        if log_file:
            from logging.handlers import RotatingFileHandler

            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=100 * 1024 * 1024,  # 100MB
                backupCount=5,
            )
            file_handler.setFormatter(JsonFormatter(include_location=include_location))
            root.addHandler(file_handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "json_logging_initialized",
        extra={"log_level": level.upper(), "backend": "loguru" if use_loguru else "stdlib"},
    )


def truncate_log_content(content: str | None, max_length: int = 1000) -> str | None:
    """Truncate large content for logging, preferring a word boundary."""
    if not content:
        return content
    if len(content) <= max_length:
        return content

    if max_length > 20:
        truncate_at = max_length - 15
        truncated = content[:truncate_at]

        last_space = truncated.rfind(" ", max(0, truncate_at - 50))
        if last_space > 0 and last_space > truncate_at - 100:
            truncated = truncated[:last_space]

        return truncated + "... [truncated]"

    return content[:max_length] + "..."


__all__ = [
    "InterceptHandler",
    "JsonFormatter",
    "setup_json_logging",
    "truncate_log_content",
]
