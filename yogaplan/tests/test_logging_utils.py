"""Tests for centralized logging configuration."""

import logging
from pathlib import Path

from yogaplan.logging_utils import (
    TICK_TRACE_TAG,
    BurstSampler,
    LogMode,
    get_log_mode,
    is_trace_logging_enabled,
    set_log_mode,
    setup_logging,
    tick_trace_allowed,
)


def _make_record(message: str) -> logging.LogRecord:
    return logging.LogRecord("yogaplan.session.transport", logging.DEBUG, __file__, 1, message, None, None)


def test_setup_logging_file_and_console_handlers(tmp_path: Path):
    log_file = tmp_path / "test.log"
    logger = setup_logging(
        level="DEBUG",
        log_file=str(log_file),
        add_console=True,
        logger_name="test_logging_utils.file_console",
    )
    logger.info("hello")
    kinds = {type(h).__name__ for h in logger.handlers}
    assert "RotatingFileHandler" in kinds
    assert "StreamHandler" in kinds
    for handler in logger.handlers:
        handler.flush()
    assert "hello" in log_file.read_text(encoding="utf-8")


def test_setup_logging_idempotent(tmp_path: Path):
    name = "test_logging_utils.idempotent"
    logger1 = setup_logging(level="INFO", log_file=str(tmp_path / "a.log"), logger_name=name)
    count = len(logger1.handlers)
    logger2 = setup_logging(level="WARNING", log_file=str(tmp_path / "a.log"), logger_name=name)
    assert logger1 is logger2
    assert len(logger2.handlers) == count
    assert logger2.level == logging.WARNING


def test_log_mode_helpers_roundtrip():
    set_log_mode(LogMode.TRACE)
    assert get_log_mode() is LogMode.TRACE
    assert is_trace_logging_enabled() is True
    assert set_log_mode("QUIET") is LogMode.QUIET
    assert is_trace_logging_enabled() is False
    assert set_log_mode("bogus") is LogMode.NORMAL


def test_trace_mode_forces_debug(tmp_path: Path):
    logger = setup_logging(
        level="INFO",
        log_file=str(tmp_path / "trace.log"),
        log_mode=LogMode.TRACE,
        logger_name="test_logging_utils.trace",
    )
    assert logger.level == logging.DEBUG


def test_quiet_mode_raises_console_level(tmp_path: Path):
    logger = setup_logging(
        level="DEBUG",
        log_file=str(tmp_path / "quiet.log"),
        log_mode=LogMode.QUIET,
        logger_name="test_logging_utils.quiet",
    )
    console = [h for h in logger.handlers if type(h) is logging.StreamHandler][0]
    assert console.level == logging.WARNING


def test_tick_trace_filter_on_handlers(tmp_path: Path, monkeypatch):
    logger = setup_logging(level="DEBUG", log_file=str(tmp_path / "tick.log"), logger_name="test_logging_utils.tick")
    handler = logger.handlers[0]
    tick = _make_record(f"{TICK_TRACE_TAG} elapsed=16.0ms")
    other = _make_record("[transport] Started")

    assert not tick_trace_allowed()
    assert not handler.filter(tick)
    assert handler.filter(other)

    monkeypatch.setenv("YOGAPLAN_TICK_TRACE", "1")
    assert handler.filter(tick)


def test_burst_sampler_flush():
    sampler = BurstSampler(interval_s=60)
    assert sampler.record() is None
    assert sampler.record(3) is None
    assert sampler.flush() == 4
    assert sampler.flush() == 0
