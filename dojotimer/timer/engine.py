"""Qt shell around the pure timer state machine.

``TimerEngine`` owns the one ``TimerState`` of the process.  Commands
and clock ticks run to completion on the GUI thread: each one computes
the next state with ``machine`` / ``sequence``, stores it, persists any
configuration that changed, executes the tick's effects and re-emits
the snapshot.

Collaborators are injected:

store
    Anything with ``load() -> ConfigurationSnapshot`` and
    ``save(**fields)``, normally ``database.config_store.ConfigStore``.
audio
    Anything with ``play_cue()``, normally ``audio.sounds.SoundManager``.

Both are optional; without them the engine is a pure in-memory timer,
which is what most tests use.  A failing collaborator is logged and
otherwise ignored so it can never stop a running session.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from . import machine, sequence
from .state import (
    ConfigurationSnapshot,
    CountdownConfig,
    Effect,
    IntervalConfig,
    TimerMode,
    TimerState,
)

log = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000


class TimerEngine(QObject):
    """Stopwatch / countdown / interval timer with sequence support.

    Signals
    -------
    state_changed(state: TimerState)
        Emitted after every command and every effective tick.
    ticked(display_seconds: int)
        Emitted on every effective tick.
    phase_changed(state: TimerState)
        An interval phase ended and the next one began.
    sequence_advanced(index: int)
        The session moved on to the sequence entry at *index*.
    session_completed(state: TimerState)
        The timer reached its terminal state.
    """

    state_changed = pyqtSignal(object)
    ticked = pyqtSignal(int)
    phase_changed = pyqtSignal(object)
    sequence_advanced = pyqtSignal(int)
    session_completed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        store=None,
        audio=None,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._audio = audio
        self._pending: ConfigurationSnapshot | None = None

        self._state: TimerState = machine.initial_state(self._load())

        # ── clock source ──────────────────────────────────────────────
        self._clock = QTimer(self)
        self._clock.setInterval(TICK_INTERVAL_MS)
        self._clock.timeout.connect(self.tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def clock_active(self) -> bool:
        return self._clock.isActive()

    @property
    def has_pending_snapshot(self) -> bool:
        return self._pending is not None

    # ══════════════════════════════════════════════════════════════════
    #  COMMANDS
    # ══════════════════════════════════════════════════════════════════

    def set_mode(self, mode: TimerMode) -> None:
        state = self._take_pending(self._state)
        self._commit(machine.set_mode(state, mode), mode=mode)

    def reset(self) -> None:
        state = self._take_pending(self._state)
        self._commit(machine.reset(state))

    def start(self) -> None:
        self._commit(machine.start(self._state))

    def pause(self) -> None:
        self._commit(machine.pause(self._state))

    def update_interval_config(self, config: IntervalConfig) -> None:
        self._commit(
            machine.update_interval_config(self._state, config),
            interval_config=config,
        )

    def update_countdown_config(self, config: CountdownConfig) -> None:
        self._commit(
            machine.update_countdown_config(self._state, config),
            countdown_config=config,
        )

    # ── sequence ──────────────────────────────────────────────────────

    def add_to_sequence(self, config: IntervalConfig) -> None:
        new = sequence.append(self._state, config)
        self._commit(new, sequence=new.sequence)

    def remove_from_sequence(self, index: int) -> None:
        new = sequence.remove_at(self._state, index)
        if new is self._state:
            log.warning("Ignoring removal of sequence entry %d (out of range)", index)
            self.state_changed.emit(self._state)
            return
        self._commit(new, sequence=new.sequence)

    def update_in_sequence(self, index: int, config: IntervalConfig) -> None:
        new = sequence.replace_at(self._state, index, config)
        if new is self._state:
            log.warning("Ignoring update of sequence entry %d (out of range)", index)
            self.state_changed.emit(self._state)
            return
        self._commit(new, sequence=new.sequence)

    def clear_sequence(self) -> None:
        self._commit(
            sequence.clear(self._state),
            sequence=(),
            sequence_mode_enabled=False,
        )

    def set_sequence_mode_enabled(self, enabled: bool) -> None:
        self._commit(
            sequence.set_enabled(self._state, enabled),
            sequence_mode_enabled=enabled,
        )

    # ── sync / teardown ───────────────────────────────────────────────

    def apply_snapshot(self, snapshot: ConfigurationSnapshot) -> None:
        """Adopt configuration pulled from a linked device.

        Applied immediately when idle.  During a session it is held back
        until the next ``reset()`` or ``set_mode()``; any key saved locally
        in the meantime overrides the held-back value.
        """
        if self._state.in_session:
            log.info("Session in progress; deferring synced configuration")
            self._pending = snapshot
            return
        self._pending = None
        self._commit(machine.apply_configuration(self._state, snapshot))

    def shutdown(self) -> None:
        """Stop the clock.  Call once at application teardown."""
        self._clock.stop()

    # ══════════════════════════════════════════════════════════════════
    #  TICK
    # ══════════════════════════════════════════════════════════════════

    def tick(self) -> None:
        """One clock pulse.  Ignored unless running and not paused."""
        state, effects = machine.tick(self._state)
        if state is self._state:
            return
        self._state = state
        self._sync_clock()

        for effect in effects:
            if effect == Effect.COUNTDOWN_CUE:
                self._play_cue()
            elif effect == Effect.PHASE_CHANGED:
                self.phase_changed.emit(state)
            elif effect == Effect.SEQUENCE_ADVANCED:
                log.info(
                    "Sequence advanced to entry %d of %d",
                    state.sequence_index + 1, len(state.sequence),
                )
                self.sequence_advanced.emit(state.sequence_index)
            elif effect == Effect.COMPLETED:
                log.info("%s timer completed", state.mode.value)
                self.session_completed.emit(state)

        self.ticked.emit(state.display_seconds)
        self.state_changed.emit(state)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _commit(self, state: TimerState, **persist) -> None:
        self._state = state
        self._sync_clock()
        if persist:
            if self._pending is not None:
                # local edits win over the held-back synced values
                self._pending = replace(self._pending, **persist)
            self._save(persist)
        self.state_changed.emit(state)

    def _sync_clock(self) -> None:
        if self._state.running and not self._state.paused:
            if not self._clock.isActive():
                self._clock.start()
        else:
            self._clock.stop()

    def _take_pending(self, state: TimerState) -> TimerState:
        if self._pending is None:
            return state
        snapshot, self._pending = self._pending, None
        log.info("Applying deferred synced configuration")
        return machine.apply_configuration(state, snapshot)

    # ── collaborators ─────────────────────────────────────────────────

    def _load(self) -> ConfigurationSnapshot:
        if self._store is None:
            return ConfigurationSnapshot()
        try:
            return self._store.load()
        except Exception:
            log.exception("Could not load timer configuration; using defaults")
            return ConfigurationSnapshot()

    def _save(self, fields: dict) -> None:
        if self._store is None:
            return
        try:
            self._store.save(**fields)
        except Exception:
            log.exception("Could not save timer configuration %s", sorted(fields))

    def _play_cue(self) -> None:
        if self._audio is None:
            return
        try:
            self._audio.play_cue()
        except Exception:
            log.exception("Audio cue failed")
