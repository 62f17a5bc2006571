"""Tests for the SQLAlchemy-backed configuration store."""

import json
from contextlib import contextmanager

import pytest
from sqlalchemy.exc import OperationalError

from dojotimer.database.config_store import (
    SAVE_ERROR_MESSAGE,
    ConfigStore,
    decode_entries,
    encode_fields,
    snapshot_from_entries,
)
from dojotimer.database.db import get_session
from dojotimer.database.models import ConfigEntry
from dojotimer.timer.state import (
    ConfigurationSnapshot,
    CountdownConfig,
    IntervalConfig,
    TimerMode,
)

from helpers import SignalCollector


class FakeSync:
    def __init__(self):
        self.pushed: list[dict] = []

    def push(self, entries):
        self.pushed.append(entries)


# ═══════════════════════════════════════════════════════════════════════════
#  ENCODING
# ═══════════════════════════════════════════════════════════════════════════


class TestEncoding:

    def test_encode_mode(self):
        assert encode_fields(mode=TimerMode.COUNTDOWN) == {"mode": '"countdown"'}

    def test_encode_interval_config(self):
        encoded = encode_fields(interval_config=IntervalConfig(30, 15, 4, 2, 45, "Legs"))
        assert json.loads(encoded["interval_config"]) == {
            "work_seconds": 30,
            "rest_seconds": 15,
            "cycles": 4,
            "sets": 2,
            "rest_between_sets_seconds": 45,
            "name": "Legs",
        }

    def test_unknown_key_raises(self):
        with pytest.raises(ValueError):
            encode_fields(volume=3)

    def test_decode_skips_corrupt_rows(self):
        fields = decode_entries({
            "mode": '"stopwatch"',
            "sequence": "{not json",
            "sequence_mode_enabled": '"yes"',
        })
        assert fields == {"mode": TimerMode.STOPWATCH}

    def test_decode_ignores_unknown_keys(self):
        assert decode_entries({"theme": '"dark"'}) == {}

    def test_decode_unknown_mode_skipped(self):
        assert decode_entries({"mode": '"marathon"'}) == {}

    def test_missing_config_fields_take_defaults(self):
        snapshot = snapshot_from_entries({"interval_config": '{"work_seconds": 45}'})
        assert snapshot.interval_config == IntervalConfig(work_seconds=45, name=None)

    def test_empty_entries_give_defaults(self):
        assert snapshot_from_entries({}) == ConfigurationSnapshot()


# ═══════════════════════════════════════════════════════════════════════════
#  STORE
# ═══════════════════════════════════════════════════════════════════════════


class TestConfigStore:

    def test_fresh_database_loads_defaults(self, store):
        snapshot = store.load()
        assert snapshot == ConfigurationSnapshot()
        assert snapshot.interval_config.name == "Tabata"
        assert snapshot.countdown_config == CountdownConfig(5, 0)

    def test_partial_save_writes_one_row(self, store):
        store.save(mode=TimerMode.STOPWATCH)
        with get_session() as db:
            keys = [row.key for row in db.query(ConfigEntry).all()]
        assert keys == ["mode"]
        assert store.load().mode == TimerMode.STOPWATCH

    def test_save_and_load_sequence(self, store):
        sequence = (IntervalConfig(name="A"), IntervalConfig(40, 20, 3, 2, 60, "B"))
        store.save(sequence=sequence, sequence_mode_enabled=True)
        snapshot = store.load()
        assert snapshot.sequence == sequence
        assert snapshot.sequence_mode_enabled is True

    def test_resave_of_loaded_snapshot_is_stable(self, store):
        store.save(
            mode=TimerMode.INTERVAL,
            interval_config=IntervalConfig(30, 15, 4, 2, 45),
            countdown_config=CountdownConfig(2, 30),
            sequence=(IntervalConfig(name="A"),),
            sequence_mode_enabled=True,
        )
        before = store.load_entries()
        store.save(**store.load().as_fields())
        assert store.load_entries() == before

    def test_later_save_overwrites(self, store):
        store.save(countdown_config=CountdownConfig(1, 0))
        store.save(countdown_config=CountdownConfig(3, 15))
        assert store.load().countdown_config == CountdownConfig(3, 15)

    def test_corrupt_row_does_not_hide_others(self, store):
        store.save(countdown_config=CountdownConfig(7, 0))
        store.write_entries({"sequence": "[{broken"})
        snapshot = store.load()
        assert snapshot.countdown_config == CountdownConfig(7, 0)
        assert snapshot.sequence == ()

    def test_unknown_key_raises(self, store):
        with pytest.raises(ValueError):
            store.save(colour="red")

    def test_save_mirrors_to_attached_sync(self, store):
        sync = FakeSync()
        store.attach_sync(sync)
        store.save(mode=TimerMode.COUNTDOWN)
        assert sync.pushed == [{"mode": '"countdown"'}]

    def test_write_entries_does_not_mirror(self, store):
        sync = FakeSync()
        store.attach_sync(sync)
        store.write_entries({"mode": '"countdown"'})
        assert sync.pushed == []


class TestSaveFailure:

    @pytest.fixture
    def broken_db(self, monkeypatch):
        @contextmanager
        def failing_session():
            raise OperationalError("INSERT", {}, Exception("database is locked"))
            yield  # pragma: no cover

        monkeypatch.setattr(
            "dojotimer.database.config_store.get_session", failing_session
        )

    def test_save_failure_reported(self, store, broken_db):
        c = SignalCollector()
        store.save_failed.connect(c)
        store.save(mode=TimerMode.COUNTDOWN)
        assert c.items == [SAVE_ERROR_MESSAGE]

    def test_failed_save_not_mirrored(self, store, broken_db):
        sync = FakeSync()
        store.attach_sync(sync)
        store.save(mode=TimerMode.COUNTDOWN)
        assert sync.pushed == []

    def test_unreadable_database_loads_defaults(self, store, broken_db):
        assert store.load() == ConfigurationSnapshot()
