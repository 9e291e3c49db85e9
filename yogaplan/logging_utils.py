"""Logging setup shared by the CLI and the GUI.

``setup_logging`` attaches a rotating file handler in the user data
directory plus an optional console handler. Per-frame transport records
carry ``TICK_TRACE_TAG`` and are dropped by a handler filter unless the
trace mode or ``YOGAPLAN_TICK_TRACE`` asks for them.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import time
from enum import Enum
from pathlib import Path
from typing import Optional

from .platform_paths import get_user_data_dir


DEFAULT_LOG_FILENAME = "yogaplan.log"
TICK_TRACE_ENV = "YOGAPLAN_TICK_TRACE"
TICK_TRACE_TAG = "[transport.tick]"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


class LogMode(str, Enum):
    """Verbosity presets selected with ``--log-mode``."""

    QUIET = "quiet"
    NORMAL = "normal"
    TRACE = "trace"


_LOG_MODE: LogMode = LogMode.NORMAL


def get_default_log_path() -> Path:
    """Log file next to storage.json, or in cwd if that directory is not writable."""
    directory = get_user_data_dir()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError:
        directory = Path.cwd()
    return directory / DEFAULT_LOG_FILENAME


def set_log_mode(mode: LogMode | str | None) -> LogMode:
    """Remember the active mode; unknown names fall back to NORMAL."""
    global _LOG_MODE
    if isinstance(mode, LogMode):
        _LOG_MODE = mode
    else:
        try:
            _LOG_MODE = LogMode((mode or "").lower())
        except ValueError:
            _LOG_MODE = LogMode.NORMAL
    return _LOG_MODE


def get_log_mode() -> LogMode:
    return _LOG_MODE


def is_trace_logging_enabled() -> bool:
    return _LOG_MODE is LogMode.TRACE


def tick_trace_allowed() -> bool:
    if os.environ.get(TICK_TRACE_ENV, "").strip().lower() in {"1", "true", "yes", "on"}:
        return True
    return is_trace_logging_enabled()


class _TickTraceFilter(logging.Filter):
    """Drops per-frame transport records unless tick tracing is on."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if TICK_TRACE_TAG not in str(record.msg):
            return True
        return tick_trace_allowed()


_TICK_TRACE_FILTER = _TickTraceFilter()


def _resolve_level(level: str | int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return int(level)


def _add_tick_filter(handler: logging.Handler) -> None:
    if not any(isinstance(f, _TickTraceFilter) for f in handler.filters):
        handler.addFilter(_TICK_TRACE_FILTER)


def setup_logging(
    *,
    level: str | int = "INFO",
    log_file: Optional[str | Path] = None,
    logger_name: Optional[str] = None,
    log_mode: LogMode | str | None = None,
    add_console: bool = True,
) -> logging.Logger:
    """Configure the root logger (or ``logger_name``) once.

    Trace mode forces DEBUG; quiet mode keeps the console at WARNING while
    the file still receives ``level``. Calling again only updates levels
    and makes sure every handler carries the tick filter.
    """
    resolved_level = _resolve_level(level)
    mode = set_log_mode(log_mode) if log_mode is not None else get_log_mode()
    if mode is LogMode.TRACE:
        resolved_level = min(resolved_level, logging.DEBUG)
    console_level = max(logging.WARNING, resolved_level) if mode is LogMode.QUIET else resolved_level

    logger = logging.getLogger(logger_name) if logger_name else logging.getLogger()
    logger.setLevel(resolved_level)

    if logger.handlers:
        for handler in logger.handlers:
            _add_tick_filter(handler)
            is_console = type(handler) is logging.StreamHandler
            handler.setLevel(console_level if is_console else resolved_level)
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%H:%M:%S")
    log_path = Path(log_file) if log_file else get_default_log_path()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
        )
    except OSError:
        # Read-only data dir: continue with console only
        file_handler = None
    if file_handler is not None:
        file_handler.setLevel(resolved_level)
        file_handler.setFormatter(formatter)
        _add_tick_filter(file_handler)
        logger.addHandler(file_handler)

    if add_console:
        console = logging.StreamHandler()
        console.setLevel(console_level)
        console.setFormatter(formatter)
        _add_tick_filter(console)
        logger.addHandler(console)

    return logger


class BurstSampler:
    """Counts repeated events and reports the total once per interval.

    The transport uses it to log a frame-count summary instead of a line
    per frame.
    """

    def __init__(self, interval_s: float = 2.0) -> None:
        self.interval_s = max(0.1, float(interval_s))
        self._next_flush = time.monotonic() + self.interval_s
        self._count = 0

    def record(self, amount: int = 1) -> Optional[int]:
        self._count += max(0, amount)
        now = time.monotonic()
        if now < self._next_flush:
            return None
        return self.flush()

    def flush(self) -> int:
        total = self._count
        self._count = 0
        self._next_flush = time.monotonic() + self.interval_s
        return total
