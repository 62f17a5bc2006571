"""Persistence adapter for the timer configuration.

The configuration is kept as one row per snapshot key in the
``timer_config`` table, each value JSON-encoded.  Keys load and save
independently: a corrupt ``sequence`` row does not cost you your
countdown setting, and ``save(mode=...)`` writes exactly one row.

Usage::

    store = ConfigStore()
    snapshot = store.load()
    store.save(mode=TimerMode.COUNTDOWN)

When a ``SyncManager`` is attached, every successful save is also
mirrored to the linked peer.  Storage errors never escape: they are
logged and reported through ``save_failed``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime

from PyQt6.QtCore import QObject, pyqtSignal
from sqlalchemy.exc import SQLAlchemyError

from ..timer.inputs import countdown_config_from_dict, interval_config_from_dict
from ..timer.state import ConfigurationSnapshot, TimerMode
from .db import get_session
from .models import ConfigEntry

log = logging.getLogger(__name__)

SNAPSHOT_KEYS = (
    "mode",
    "interval_config",
    "countdown_config",
    "sequence",
    "sequence_mode_enabled",
)

SAVE_ERROR_MESSAGE = "Could not save configuration"


# ══════════════════════════════════════════════════════════════════════════
#  ENCODING
# ══════════════════════════════════════════════════════════════════════════


def _to_jsonable(key: str, value):
    if key == "mode":
        return TimerMode(value).value
    if key in ("interval_config", "countdown_config"):
        return value.to_dict()
    if key == "sequence":
        return [config.to_dict() for config in value]
    return bool(value)


def _from_jsonable(key: str, data):
    if key == "mode":
        return TimerMode(data)
    if key == "interval_config":
        return interval_config_from_dict(data)
    if key == "countdown_config":
        return countdown_config_from_dict(data)
    if key == "sequence":
        if not isinstance(data, list):
            raise ValueError("sequence must be a list")
        return tuple(interval_config_from_dict(item) for item in data)
    if not isinstance(data, bool):
        raise ValueError("sequence_mode_enabled must be a boolean")
    return data


def encode_fields(**fields) -> dict[str, str]:
    """Snapshot fields → ``{key: json_text}``.  Unknown keys raise."""
    unknown = set(fields) - set(SNAPSHOT_KEYS)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
    return {
        key: json.dumps(_to_jsonable(key, value), sort_keys=True)
        for key, value in fields.items()
    }


def decode_entries(entries: dict[str, str]) -> dict:
    """``{key: json_text}`` → snapshot fields, skipping unreadable rows."""
    fields = {}
    for key, text in entries.items():
        if key not in SNAPSHOT_KEYS:
            continue
        try:
            fields[key] = _from_jsonable(key, json.loads(text))
        except ValueError as exc:  # JSONDecodeError is a ValueError
            log.warning("Ignoring stored %s: %s", key, exc)
    return fields


def snapshot_from_entries(entries: dict[str, str]) -> ConfigurationSnapshot:
    return ConfigurationSnapshot(**decode_entries(entries))


# ══════════════════════════════════════════════════════════════════════════
#  STORE
# ══════════════════════════════════════════════════════════════════════════


class ConfigStore(QObject):
    """Load/save the persisted timer configuration.

    Signals
    -------
    save_failed(message: str)
        A write could not be committed.  The session carries on.
    """

    save_failed = pyqtSignal(str)

    def __init__(self, parent: QObject | None = None, *, sync=None) -> None:
        super().__init__(parent)
        self._sync = sync

    def attach_sync(self, sync) -> None:
        """Mirror future saves through *sync* (a ``SyncManager``)."""
        self._sync = sync

    # ── reading ───────────────────────────────────────────────────────

    def load_entries(self) -> dict[str, str]:
        """Raw ``{key: json_text}`` rows, or ``{}`` if the DB is unreadable."""
        try:
            with get_session() as db:
                return {row.key: row.value for row in db.query(ConfigEntry).all()}
        except SQLAlchemyError:
            log.exception("Could not read timer configuration")
            return {}

    def load(self) -> ConfigurationSnapshot:
        return snapshot_from_entries(self.load_entries())

    # ── writing ───────────────────────────────────────────────────────

    def save(self, **fields) -> None:
        """Persist the given snapshot keys, then mirror them if linked."""
        entries = encode_fields(**fields)
        if not entries:
            return
        if not self.write_entries(entries):
            return
        if self._sync is not None:
            self._sync.push(entries)

    def write_entries(self, entries: dict[str, str]) -> bool:
        """Upsert raw rows locally without mirroring.  Returns success."""
        now = datetime.utcnow()
        try:
            with get_session() as db:
                for key, value in entries.items():
                    db.merge(ConfigEntry(key=key, value=value, updated_at=now))
        except SQLAlchemyError:
            log.exception("Could not save timer configuration %s", sorted(entries))
            self.save_failed.emit(SAVE_ERROR_MESSAGE)
            return False
        log.debug("Saved configuration keys %s", sorted(entries))
        return True
