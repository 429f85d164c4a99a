"""
Centralized logging configuration for the search orchestration service.

Structured JSON logs go to rotating files under LOG_DIR:
- app.log    INFO and above
- error.log  ERROR and above
- debug.log  everything, only when LOG_LEVEL=DEBUG

Console output is opt-in (LOG_TO_CONSOLE=true) and human-readable.
Per-call context travels in ``extra={"extra_fields": {...}}``; the id of the
HTTP request being served (if any) is added to every record automatically.
"""

import json
import logging
import logging.handlers
import os
import sys
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import Any

# Set by server.middleware.RequestIDMiddleware for the duration of a request
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``extra_fields`` are merged at top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        request_id = request_id_var.get()
        if request_id:
            entry["request_id"] = request_id

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            entry.update(extra_fields)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class LoggerConfig:
    LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_TO_CONSOLE = os.getenv("LOG_TO_CONSOLE", "false").lower() == "true"
    MAX_BYTES = 10 * 1024 * 1024
    BACKUP_COUNT = 5

    _initialized = False

    @classmethod
    def _file_handler(cls, filename: str, level: int) -> logging.Handler:
        handler = logging.handlers.RotatingFileHandler(
            cls.LOG_DIR / filename,
            maxBytes=cls.MAX_BYTES,
            backupCount=cls.BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(JsonFormatter())
        return handler

    @classmethod
    def _console_handler(cls) -> logging.Handler:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.WARNING)
        handler.setFormatter(
            logging.Formatter(
                fmt="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        return handler

    @classmethod
    def setup_logging(cls) -> None:
        """Configure the root logger once per process; later calls are no-ops."""
        if cls._initialized:
            return

        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)

        root = logging.getLogger()
        root.setLevel(getattr(logging, cls.LOG_LEVEL, logging.INFO))
        root.handlers.clear()

        handlers = [
            cls._file_handler("app.log", logging.INFO),
            cls._file_handler("error.log", logging.ERROR),
        ]
        if cls.LOG_LEVEL == "DEBUG":
            handlers.append(cls._file_handler("debug.log", logging.DEBUG))
        if cls.LOG_TO_CONSOLE:
            handlers.append(cls._console_handler())
        for handler in handlers:
            root.addHandler(handler)

        # httpx logs every request line at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)

        cls._initialized = True

        logging.getLogger(__name__).info(
            "Logging system initialized",
            extra={
                "extra_fields": {
                    "log_level": cls.LOG_LEVEL,
                    "log_dir": str(cls.LOG_DIR),
                    "console_logging": cls.LOG_TO_CONSOLE,
                }
            },
        )


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Example:
        >>> from utils.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Search tier completed", extra={"extra_fields": {"tier": "combined"}})
    """
    LoggerConfig.setup_logging()
    return logging.getLogger(name)
