"""Main application window for DojoTimer."""

from __future__ import annotations

import logging

from PyQt6.QtGui import QAction, QCloseEvent, QKeySequence
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QTabWidget, QLabel,
    QInputDialog, QLineEdit, QMessageBox,
)

from .audio.sounds import SoundManager
from .database.config_store import ConfigStore
from .settings import Settings, load_settings, save_settings
from .sync.manager import SyncManager, SyncStatus, generate_device_code
from .timer.engine import TimerEngine
from .ui.config_panel import ConfigPanel
from .ui.timer_widget import TimerWidget

log = logging.getLogger(__name__)

STATUS_MESSAGE_MS = 5000


def sync_status_text(status: SyncStatus) -> str:
    if status.error:
        return status.error
    if not status.is_linked:
        return "Not linked"
    if status.is_syncing:
        return "Syncing…"
    text = f"Linked ({status.device_code})"
    if status.last_sync is not None:
        text += f" · last sync {status.last_sync:%H:%M}"
    return text


class DojoTimerApp(QMainWindow):
    """Top-level window: timer tab, setup tab, status bar."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        sounds: SoundManager | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("DojoTimer")
        self._settings = settings or load_settings()

        # ── collaborators ────────────────────────────────────────────
        self._sounds = sounds or SoundManager(parent=self)
        self._sounds.set_enabled(self._settings.sound_enabled)
        self._sounds.set_volume(self._settings.sound_volume)

        self._store = ConfigStore(parent=self)
        self._sync = SyncManager(self._store, self._settings, parent=self)
        self._engine = TimerEngine(parent=self, store=self._store, audio=self._sounds)

        # ── widgets ──────────────────────────────────────────────────
        central = QWidget(self)
        layout = QVBoxLayout(central)
        self._tabs = QTabWidget(central)
        self._timer_widget = TimerWidget(self._engine, self._tabs)
        self._config_panel = ConfigPanel(self._engine, self._tabs)
        self._tabs.addTab(self._timer_widget, "Timer")
        self._tabs.addTab(self._config_panel, "Setup")
        layout.addWidget(self._tabs)
        self.setCentralWidget(central)

        self._sync_label = QLabel(sync_status_text(self._sync.status), self)
        self.statusBar().addPermanentWidget(self._sync_label)

        self._build_menu_bar()
        self._connect_signals()
        self._restore_geometry()

    # ── accessors ─────────────────────────────────────────────────────────

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    @property
    def sync(self) -> SyncManager:
        return self._sync

    # ── build ─────────────────────────────────────────────────────────────

    def _build_menu_bar(self) -> None:
        timer_menu = self.menuBar().addMenu("Timer")

        toggle_action = QAction("Start / Pause", self)
        toggle_action.setShortcut(QKeySequence("Space"))
        toggle_action.triggered.connect(self._toggle_running)
        timer_menu.addAction(toggle_action)

        reset_action = QAction("Reset", self)
        reset_action.setShortcut(QKeySequence("R"))
        reset_action.triggered.connect(self._engine.reset)
        timer_menu.addAction(reset_action)

        sync_menu = self.menuBar().addMenu("Devices")

        code_action = QAction("Generate Link Code…", self)
        code_action.triggered.connect(self._show_new_code)
        sync_menu.addAction(code_action)

        link_action = QAction("Link Device…", self)
        link_action.triggered.connect(self._link_device)
        sync_menu.addAction(link_action)

        unlink_action = QAction("Unlink", self)
        unlink_action.triggered.connect(self._sync.unlink)
        sync_menu.addAction(unlink_action)

        sync_now_action = QAction("Sync Now", self)
        sync_now_action.triggered.connect(self._sync.sync_now)
        sync_menu.addAction(sync_now_action)

    def _connect_signals(self) -> None:
        self._engine.phase_changed.connect(
            lambda _state: self._sounds.play("phase_change")
        )
        self._engine.session_completed.connect(
            lambda _state: self._sounds.play("session_complete")
        )
        self._store.save_failed.connect(self._show_status_message)
        self._sync.sync_failed.connect(self._show_status_message)
        self._sync.status_changed.connect(
            lambda status: self._sync_label.setText(sync_status_text(status))
        )
        self._sync.snapshot_pulled.connect(self._engine.apply_snapshot)

    # ── slots ─────────────────────────────────────────────────────────────

    def _toggle_running(self) -> None:
        if self._engine.state.running:
            self._engine.pause()
        else:
            self._engine.start()

    def _show_status_message(self, message: str) -> None:
        self.statusBar().showMessage(message, STATUS_MESSAGE_MS)

    def _show_new_code(self) -> None:
        code = generate_device_code()
        QMessageBox.information(
            self,
            "Link Code",
            f"Enter this code on your other device:\n\n{code}",
        )

    def _link_device(self) -> None:
        code, ok = QInputDialog.getText(self, "Link Device", "Link code:")
        if not ok or not code.strip():
            return
        name, ok = QInputDialog.getText(
            self, "Link Device", "Name for this device:",
            QLineEdit.EchoMode.Normal, "My device",
        )
        if not ok:
            return
        url, ok = QInputDialog.getText(
            self, "Link Device", "Shared database URL:",
            QLineEdit.EchoMode.Normal, self._settings.sync_remote_url or "",
        )
        if not ok or not url.strip():
            return
        self._sync.link(code, name.strip(), url.strip())

    # ── window geometry ───────────────────────────────────────────────────

    def _restore_geometry(self) -> None:
        s = self._settings
        self.resize(s.window_width, s.window_height)
        if s.window_x is not None and s.window_y is not None:
            self.move(s.window_x, s.window_y)

    def _save_geometry(self) -> None:
        geo = self.geometry()
        self._settings.window_x = geo.x()
        self._settings.window_y = geo.y()
        self._settings.window_width = geo.width()
        self._settings.window_height = geo.height()
        try:
            save_settings(self._settings)
        except OSError:
            log.exception("Could not save window geometry")

    def closeEvent(self, event: QCloseEvent) -> None:
        self._engine.shutdown()
        self._sync.shutdown()
        self._save_geometry()
        super().closeEvent(event)
