"""Logging setup for dictation-cleanup.

Every module logs through a child of the ``dictation_cleanup`` logger.
Correction and storage code attach fields with ``extra=`` (``position``,
``correction``, ``key``, ``path``, ``errors``); the formatter appends them
to the line, or nests them under ``fields`` in JSON mode.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Any

ROOT_LOGGER_NAME = "dictation_cleanup"

# Attributes every LogRecord has; anything else came in through ``extra=``
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class LogLevel(IntEnum):
    """CLI verbosity levels."""

    QUIET = 0  # Errors only
    NORMAL = 1  # Warnings, e.g. a corrupt settings file
    VERBOSE = 2  # Dictionary loads and training summaries
    DEBUG = 3  # Every correction and veto


_LEVELS = {
    LogLevel.QUIET: logging.ERROR,
    LogLevel.NORMAL: logging.WARNING,
    LogLevel.VERBOSE: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


@dataclass
class LogConfig:
    """Logging configuration.

    Attributes:
        level: Console verbosity
        log_file: Optional file that receives every record at DEBUG
        json_format: Emit one JSON object per record
    """

    level: LogLevel = LogLevel.NORMAL
    log_file: Path | None = None
    json_format: bool = False


def record_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Fields a caller attached to a record through ``extra=``."""
    return {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}


def _short_name(name: str) -> str:
    prefix = ROOT_LOGGER_NAME + "."
    return name[len(prefix):] if name.startswith(prefix) else name


class StructuredFormatter(logging.Formatter):
    """Formats records as ``LEVEL module: message key=value`` or JSON."""

    def __init__(self, json_format: bool = False, include_timestamp: bool = True):
        super().__init__()
        self.json_format = json_format
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        fields = record_fields(record)
        if self.json_format:
            return self._format_json(record, fields)

        line = f"{record.levelname:<7} {_short_name(record.name)}: {record.getMessage()}"
        if self.include_timestamp:
            line = f"{datetime.fromtimestamp(record.created):%H:%M:%S} {line}"
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line

    def _format_json(self, record: logging.LogRecord, fields: dict[str, Any]) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.include_timestamp:
            payload["time"] = datetime.fromtimestamp(record.created).isoformat()
        if fields:
            payload["fields"] = fields
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        # Unserializable field values fall back to their str()
        return json.dumps(payload, default=str, ensure_ascii=False)


_config = LogConfig()
_configured = False


def configure_logging(config: LogConfig | None = None) -> None:
    """(Re)install handlers on the package logger.

    Args:
        config: New configuration; the current one is reused if None
    """
    global _config, _configured
    if config is not None:
        _config = config

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()

    console_level = _LEVELS[_config.level]
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(StructuredFormatter(json_format=_config.json_format, include_timestamp=False))
    root.addHandler(console)
    root.setLevel(console_level)

    if _config.log_file:
        _config.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(_config.log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(StructuredFormatter(json_format=_config.json_format))
        root.addHandler(file_handler)
        root.setLevel(logging.DEBUG)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a package logger, configuring defaults on first use.

    Args:
        name: Logger name (usually __name__)
    """
    if not _configured:
        configure_logging()
    return logging.getLogger(name)


def set_verbosity(level: LogLevel) -> None:
    """Change console verbosity, keeping any file logging."""
    _config.level = level
    configure_logging()


def enable_file_logging(log_file: Path) -> None:
    """Also write every record to ``log_file``."""
    _config.log_file = log_file
    configure_logging()
