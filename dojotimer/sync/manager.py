"""Device linking and configuration sync.

Two devices share a timer configuration by linking to the same remote
database under the same six-character code.  Once linked:

- every local save is mirrored to the peer (``push``), and
- every ``sync_interval_seconds`` the peer is polled on a
  ``QThreadPool`` worker.  Only the remote query runs off the GUI
  thread; the result comes back through a queued signal and is applied
  between ticks, so the timer never waits on the network and no lock is
  shared with it.

Changed rows are written to the local store without being mirrored
back, and ``snapshot_pulled`` hands the fresh configuration to whoever
listens (the app forwards it to ``TimerEngine.apply_snapshot``).
"""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass, replace
from datetime import datetime

from PyQt6.QtCore import QObject, QRunnable, QThreadPool, QTimer, pyqtSignal
from sqlalchemy.exc import SQLAlchemyError

from ..database.config_store import SNAPSHOT_KEYS
from ..settings import Settings, save_settings
from .remote import RemotePeer

log = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6


def generate_device_code(length: int = CODE_LENGTH) -> str:
    """Random link code, e.g. ``"7KQ2ZD"``."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


@dataclass(frozen=True)
class SyncStatus:
    is_linked: bool = False
    device_code: str | None = None
    linked_device_name: str | None = None
    last_sync: datetime | None = None
    error: str | None = None
    is_syncing: bool = False


# ── background pull ───────────────────────────────────────────────────────


class _PullSignals(QObject):
    finished = pyqtSignal(object)
    failed = pyqtSignal(str)


class _PullTask(QRunnable):
    """Fetch the peer's rows on a pool thread."""

    def __init__(self, peer: RemotePeer, signals: _PullSignals) -> None:
        super().__init__()
        self._peer = peer
        self._signals = signals

    def run(self) -> None:
        try:
            entries = self._peer.pull()
        except Exception as exc:  # must always report back to the GUI thread
            self._signals.failed.emit(str(exc))
            return
        self._signals.finished.emit(entries)


# ── manager ───────────────────────────────────────────────────────────────


class SyncManager(QObject):
    """Link state, mirroring and polling for one ``ConfigStore``.

    Signals
    -------
    status_changed(status: SyncStatus)
    snapshot_pulled(snapshot: ConfigurationSnapshot)
        The peer had configuration this device did not.
    sync_failed(message: str)
    """

    status_changed = pyqtSignal(object)
    snapshot_pulled = pyqtSignal(object)
    sync_failed = pyqtSignal(str)

    def __init__(
        self,
        store,
        settings: Settings,
        parent: QObject | None = None,
        *,
        peer_factory=RemotePeer,
        thread_pool: QThreadPool | None = None,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._settings = settings
        self._peer_factory = peer_factory
        self._pool = thread_pool or QThreadPool.globalInstance()
        self._peer: RemotePeer | None = None
        self._pull_in_flight = False
        self._status = SyncStatus()

        self._pull_signals = _PullSignals(self)
        self._pull_signals.finished.connect(self._on_pull_finished)
        self._pull_signals.failed.connect(self._on_pull_failed)

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(max(1, settings.sync_interval_seconds) * 1000)
        self._poll_timer.timeout.connect(self.poll)

        store.attach_sync(self)
        self._restore_link()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def is_linked(self) -> bool:
        return self._peer is not None

    @property
    def polling(self) -> bool:
        return self._poll_timer.isActive()

    def link(self, code: str, device_name: str, remote_url: str) -> bool:
        """Join the link *code* on the peer database at *remote_url*."""
        code = (code or "").strip().upper()
        if not code:
            self._fail("Enter a device code to link")
            return False

        self._set_status(is_syncing=True, error=None)
        peer = None
        try:
            peer = self._peer_factory(remote_url, code)
            peer.ensure_schema()
        except (SQLAlchemyError, ImportError) as exc:
            if peer is not None:
                peer.dispose()
            log.warning("Could not link to %s: %s", remote_url, exc)
            self._set_status(is_syncing=False)
            self._fail(f"Failed to link device: {exc}")
            return False

        self._drop_peer()
        self._peer = peer
        self._settings.sync_remote_url = remote_url
        self._settings.sync_device_code = code
        self._settings.sync_device_name = device_name or None
        self._persist_settings()
        log.info("Linked as %r with code %s", device_name, code)

        self._set_status(
            is_linked=True,
            device_code=code,
            linked_device_name=device_name or None,
            is_syncing=False,
        )
        self._poll_timer.start()
        self.sync_now()
        return True

    def unlink(self) -> None:
        self._poll_timer.stop()
        self._drop_peer()
        self._settings.sync_remote_url = None
        self._settings.sync_device_code = None
        self._settings.sync_device_name = None
        self._settings.sync_last_sync = None
        self._persist_settings()
        log.info("Device unlinked")
        self._status = SyncStatus()
        self.status_changed.emit(self._status)

    def push(self, entries: dict[str, str]) -> None:
        """Mirror freshly saved rows to the peer.  No-op when unlinked."""
        if self._peer is None or not entries:
            return
        try:
            self._peer.push(entries)
        except SQLAlchemyError as exc:
            log.warning("Could not mirror %s: %s", sorted(entries), exc)
            self._fail("Failed to update remote data")
            return
        self._mark_synced()

    def sync_now(self) -> bool:
        """Pull from the peer on the calling thread and apply the result.

        A peer with nothing stored for this code is seeded from the
        local configuration instead.
        """
        if self._peer is None:
            return False
        try:
            entries = self._peer.pull()
            if not entries:
                local = self._store.load_entries()
                if local:
                    self._peer.push(local)
                self._mark_synced()
                return True
        except SQLAlchemyError as exc:
            log.warning("Sync failed: %s", exc)
            self._fail("Failed to sync")
            return False
        self._apply_remote(entries)
        return True

    def poll(self) -> None:
        """Start a background pull unless one is already running."""
        if self._peer is None or self._pull_in_flight:
            return
        self._pull_in_flight = True
        self._set_status(is_syncing=True)
        self._pool.start(_PullTask(self._peer, self._pull_signals))

    def shutdown(self) -> None:
        self._poll_timer.stop()
        self._pool.waitForDone()
        self._drop_peer()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _restore_link(self) -> None:
        url = self._settings.sync_remote_url
        code = self._settings.sync_device_code
        if not url or not code:
            return
        try:
            self._peer = self._peer_factory(url, code)
        except (SQLAlchemyError, ImportError) as exc:
            log.warning("Could not restore device link: %s", exc)
            self._fail("Failed to restore device link")
            return
        last_sync = None
        if self._settings.sync_last_sync:
            try:
                last_sync = datetime.fromisoformat(self._settings.sync_last_sync)
            except ValueError:
                log.warning("Ignoring bad last-sync time %r", self._settings.sync_last_sync)
        self._status = SyncStatus(
            is_linked=True,
            device_code=code,
            linked_device_name=self._settings.sync_device_name,
            last_sync=last_sync,
        )
        self._poll_timer.start()

    def _on_pull_finished(self, entries: dict) -> None:
        self._pull_in_flight = False
        if self._peer is None:
            return  # unlinked while the pull was running
        self._apply_remote(entries)

    def _on_pull_failed(self, message: str) -> None:
        self._pull_in_flight = False
        log.warning("Background sync failed: %s", message)
        self._set_status(is_syncing=False)
        self._fail("Failed to sync")

    def _apply_remote(self, entries: dict[str, str]) -> None:
        local = self._store.load_entries()
        changed = {
            key: value
            for key, value in entries.items()
            if key in SNAPSHOT_KEYS and local.get(key) != value
        }
        if changed and self._store.write_entries(changed):
            log.info("Pulled configuration keys %s", sorted(changed))
            self.snapshot_pulled.emit(self._store.load())
        self._mark_synced()

    def _mark_synced(self) -> None:
        now = datetime.now()
        self._settings.sync_last_sync = now.isoformat()
        self._persist_settings()
        self._set_status(last_sync=now, is_syncing=False, error=None)

    def _fail(self, message: str) -> None:
        self._set_status(error=message)
        self.sync_failed.emit(message)

    def _set_status(self, **changes) -> None:
        self._status = replace(self._status, **changes)
        self.status_changed.emit(self._status)

    def _drop_peer(self) -> None:
        if self._peer is not None:
            self._peer.dispose()
            self._peer = None

    def _persist_settings(self) -> None:
        try:
            save_settings(self._settings)
        except OSError:
            log.exception("Could not save link settings")
