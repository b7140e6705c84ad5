"""Structured logging configuration for the chat service."""

import json
import logging
import logging.config
import logging.handlers
import os
from datetime import datetime, timezone
from pathlib import Path

from .config import DEFAULT_LOG_PATH

SERVICE_NAME = "chat-api"

# Third-party loggers that log every outbound request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "anthropic")

# Routed through our handlers instead of uvicorn's own
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per line; `extra={"context": {...}}` is kept as a nested object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Ids and datetimes in context are not always JSON-native
        return json.dumps(entry, default=str, ensure_ascii=False)


def build_logging_config(
    log_level: str,
    log_file: str | None,
    console_format: str = "json",
) -> dict:
    """dictConfig for the API: JSON file log, JSON or text console."""
    formatters = {
        "json": {"()": "chat_core.logging_config.JSONFormatter"},
        "text": {"format": TEXT_FORMAT},
    }
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "text" if console_format == "text" else "json",
            "stream": "ext://sys.stdout",
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "formatter": "json",
            "encoding": "utf-8",
        }

    loggers = {name: {"level": "WARNING"} for name in NOISY_LOGGERS}
    for name in UVICORN_LOGGERS:
        loggers[name] = {"handlers": [], "propagate": True}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "loggers": loggers,
        "root": {"level": log_level.upper(), "handlers": list(handlers)},
    }


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
) -> None:
    """
    Configure logging for the API process.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
                   Defaults to the LOG_LEVEL env var, then INFO.
        log_file: Rotating JSON log file. Defaults to logs/app.log;
                  LOG_FILE="" disables the file handler.
    """
    log_level = log_level or os.getenv("LOG_LEVEL", "INFO")
    if log_file is None:
        log_file = os.getenv("LOG_FILE", str(DEFAULT_LOG_PATH))

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(
        build_logging_config(
            log_level, log_file, console_format=os.getenv("LOG_FORMAT", "json")
        )
    )


def get_logger(name: str) -> logging.Logger:
    """Module logger; call with `__name__`."""
    return logging.getLogger(name)
