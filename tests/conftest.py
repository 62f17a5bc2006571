"""Shared pytest fixtures for DojoTimer tests."""

import os
import sys
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from dojotimer.database.config_store import ConfigStore
from dojotimer.database.db import configure_engine, init_db
from dojotimer.timer.engine import TimerEngine
from dojotimer.timer.state import ConfigurationSnapshot, IntervalConfig

from helpers import FakeAudio, FakeStore


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep settings.json writes inside the test's tmp dir."""
    monkeypatch.setattr("dojotimer.settings.SETTINGS_PATH", tmp_path / "settings.json")
    monkeypatch.setattr("dojotimer.settings.APP_SUPPORT_DIR", tmp_path)
    yield tmp_path / "settings.json"


@pytest.fixture
def audio():
    return FakeAudio()


@pytest.fixture
def engine(qapp, audio):
    """Fresh TimerEngine with default config, no persistence."""
    return TimerEngine(parent=None, audio=audio)


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def engine_fake_store(qapp, fake_store, audio):
    """TimerEngine recording every save in ``fake_store.saves``."""
    return TimerEngine(parent=None, store=fake_store, audio=audio)


@pytest.fixture
def store(qapp):
    """ConfigStore on the per-test in-memory database."""
    return ConfigStore(parent=None)


@pytest.fixture
def short_interval():
    """work=20, rest=10, cycles=2, sets=1, rest between sets=60."""
    return IntervalConfig(
        work_seconds=20, rest_seconds=10, cycles=2, sets=1,
        rest_between_sets_seconds=60,
    )


@pytest.fixture
def two_block_snapshot():
    """Sequence mode on: A(5/5 ×1 ×1) then B(8/0 ×1 ×1)."""
    return ConfigurationSnapshot(
        sequence=(
            IntervalConfig(5, 5, 1, 1, 0, "A"),
            IntervalConfig(8, 0, 1, 1, 0, "B"),
        ),
        sequence_mode_enabled=True,
    )
