"""
Logging for the token extension service.

Every record is written as one JSON object per line, to stdout and to a
rotating file. Bridge and gateway records pass queue and transaction
details through ``extra={"context": {...}}``; those land under the
``context`` key. Web3 fetches run in worker threads, so the thread name is
recorded too.
"""

import json
import logging
import logging.config
import logging.handlers
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import DEFAULT_LOG_PATH, resolve_path

# web3 logs every JSON-RPC request at DEBUG
NOISY_LOGGERS = ("web3", "urllib3", "httpx", "asyncio")

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
            "thread": record.threadName,
        }

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Addresses, enums and HexBytes are not JSON types
        return json.dumps(entry, default=str)


def build_logging_config(log_level: str, log_file: str | None) -> dict:
    """dictConfig for the service. A None log_file logs to stdout only."""
    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": MAX_LOG_BYTES,
            "backupCount": LOG_BACKUPS,
            "formatter": "json",
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"json": {"()": JSONFormatter}},
        "handlers": handlers,
        "loggers": {name: {"level": "WARNING"} for name in NOISY_LOGGERS},
        "root": {"level": log_level.upper(), "handlers": list(handlers)},
    }


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
) -> None:
    """
    Configure logging for the service.

    Args:
        log_level: Root level. Defaults to LOG_LEVEL or INFO.
        log_file: Rotating log file. Defaults to LOG_FILE, then logs/app.log.
                  LOG_FILE set to an empty string turns file logging off.
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO")

    if log_file is None:
        env_file = os.getenv("LOG_FILE")
        if env_file is None:
            log_file = str(DEFAULT_LOG_PATH)
        elif env_file:
            log_file = str(resolve_path(env_file))

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(log_level, log_file))


def get_logger(name: str) -> logging.Logger:
    """Module logger; configured by setup_logging()."""
    return logging.getLogger(name)
