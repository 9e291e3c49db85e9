"""pytest configuration file."""

import logging
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from yogaplan.logging_utils import LogMode, set_log_mode
from yogaplan.session.scheduling import ManualTickScheduler
from yogaplan.storage.backend import MemoryStore
from yogaplan.storage.library import CardLibrary


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (may take several seconds)"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


@pytest.fixture(autouse=True)
def _isolate_data_and_logs(tmp_path, monkeypatch):
    monkeypatch.setenv("YOGAPLAN_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("YOGAPLAN_TICK_TRACE", raising=False)
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    set_log_mode(LogMode.NORMAL)


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now: float = 0.0):
        self.now = float(now)

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


@pytest.fixture
def clock():
    return FakeClock(1_000.0)


@pytest.fixture
def scheduler():
    return ManualTickScheduler()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def library(store):
    lib = CardLibrary(store)
    lib.initialize_defaults()
    return lib


@pytest.fixture
def cli_args(tmp_path):
    """Common CLI flags keeping logs and data inside the test directory."""
    return [
        "--log-file", str(tmp_path / "cli.log"),
        "--log-level", "WARNING",
        "--data-dir", str(tmp_path / "data"),
    ]
