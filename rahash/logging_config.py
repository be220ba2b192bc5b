#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
Logging setup for ra-hash

- Console output on stderr, colored through colorlog when attached to a TTY
- Optional rotating file log
- Optional structured JSON lines (RA_HASH_LOG_JSON=1)

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed by whoever embeds the scanner, usually through setup_logging().
"""

import json
import logging
import logging.handlers
import os
import sys
import time
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import colorlog

LOG_FILE_NAME = "ra_hash.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 3

# =====================================================================================================
# Formatters
# =====================================================================================================

_PLAIN_FORMATS = {
    logging.ERROR: "[{asctime}] ERROR   [{name}] {message}",
    logging.WARNING: "[{asctime}] WARNING [{name}] {message}",
    logging.INFO: "[{asctime}] INFO    {message}",
    logging.DEBUG: "[{asctime}] DEBUG   {name}:{lineno} - {message}",
}

_LOG_COLORS = {
    'DEBUG': 'blue',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'bold_red',
}


class FastFormatter(logging.Formatter):
    """Plain formatter with one pre-built format string per level."""

    def __init__(self, datefmt: str = '%H:%M:%S'):
        super().__init__(datefmt=datefmt)
        self._formatters = {
            level: logging.Formatter(fmt, style='{', datefmt=datefmt)
            for level, fmt in _PLAIN_FORMATS.items()
        }

    def format(self, record: logging.LogRecord) -> str:
        level = max((lvl for lvl in self._formatters if lvl <= record.levelno), default=logging.DEBUG)
        return self._formatters[level].format(record)


class JsonFormatter(logging.Formatter):
    """Structured JSON formatter (optional)."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "thread": record.threadName,
            "process": record.process,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def colored_formatter() -> logging.Formatter:
    return colorlog.ColoredFormatter(
        "{log_color}[{asctime}] {levelname:<7}{reset} {message}",
        datefmt='%H:%M:%S',
        style='{',
        log_colors=_LOG_COLORS,
    )


# =====================================================================================================
# Setup
# =====================================================================================================

def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _stream_supports_color(stream) -> bool:
    return (hasattr(stream, 'isatty') and stream.isatty()
            and os.environ.get('TERM') != 'dumb')


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    enable_file_logging: bool = False,
    enable_console_logging: bool = True,
    structured_json: Optional[bool] = None,
    debug: bool = False,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> Dict[str, Any]:
    """Install handlers on the root logger, replacing any previous ones.

    ``debug`` forces DEBUG level, which turns on the scanner's per-file timing
    and progress lines.
    """
    numeric_level = logging.DEBUG if debug else getattr(logging, str(log_level).upper(), logging.INFO)
    use_json = structured_json if structured_json is not None else _env_bool("RA_HASH_LOG_JSON")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers: Dict[str, logging.Handler] = {}

    if enable_console_logging:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        if use_json:
            console_handler.setFormatter(JsonFormatter())
        elif _stream_supports_color(sys.stderr):
            console_handler.setFormatter(colored_formatter())
        else:
            console_handler.setFormatter(FastFormatter())
        root_logger.addHandler(console_handler)
        handlers['console'] = console_handler

    log_dir_path = Path(log_dir) if log_dir else Path("logs")
    if enable_file_logging:
        log_dir_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            str(log_dir_path / LOG_FILE_NAME),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(JsonFormatter() if use_json else FastFormatter())
        root_logger.addHandler(file_handler)
        handlers['file'] = file_handler

    logging.getLogger('rahash').debug(
        "Logging initialized: level=%s file=%s json=%s",
        logging.getLevelName(numeric_level), enable_file_logging, use_json,
    )
    return {'handlers': handlers, 'log_dir': log_dir_path, 'level': numeric_level}


def setup_from_settings(settings, debug: bool = False) -> Dict[str, Any]:
    """setup_logging() driven by a :class:`rahash.config.LoggingSettings`."""
    return setup_logging(
        log_level=settings.level,
        log_dir=settings.log_dir,
        enable_file_logging=settings.file_logging,
        enable_console_logging=settings.console_logging,
        structured_json=settings.structured_json,
        debug=debug,
    )


@lru_cache(maxsize=32)
def get_logger(name: str) -> logging.Logger:
    """Get cached logger instance."""
    return logging.getLogger(f"rahash.{name}")


def cleanup_logging() -> None:
    """Close and detach every root handler."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    get_logger.cache_clear()


class LoggingTimer:
    """Logs how long the wrapped block took, at DEBUG."""

    def __init__(self, operation_name: str, logger: Optional[logging.Logger] = None,
                 level: int = logging.DEBUG):
        self.operation_name = operation_name
        self.logger = logger or get_logger('performance')
        self.level = level
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            self.duration = time.perf_counter() - self.start_time
            self.logger.log(self.level, "%s took %.3fs", self.operation_name, self.duration)
        return False
