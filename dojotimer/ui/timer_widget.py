"""Main timer display: mode picker, clock, phase and controls.

Layout (top → bottom):
    - Mode selector (Interval / Countdown / Stopwatch)
    - Phase label (WORK / REST / SET REST / ...)
    - Large clock
    - Phase progress bar
    - Round text ("Cycle 2/8 · Set 1/2 · Block 1/3")
    - Reset + Start/Pause buttons

The widget never touches ``TimerState`` directly: it renders each
snapshot from ``state_changed`` and dispatches commands to the engine.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QFrame, QComboBox, QProgressBar,
)

from ..timer.engine import TimerEngine
from ..timer.state import Phase, TimerMode, TimerState


MODE_LABELS: dict[TimerMode, str] = {
    TimerMode.INTERVAL:  "Interval",
    TimerMode.COUNTDOWN: "Countdown",
    TimerMode.STOPWATCH: "Stopwatch",
}

PHASE_LABELS: dict[Phase, str] = {
    Phase.WORK:     "WORK",
    Phase.REST:     "REST",
    Phase.SET_REST: "SET REST",
}

PHASE_COLORS: dict[str, str] = {
    "work":      "#EF4444",
    "rest":      "#F59E0B",
    "set_rest":  "#3B82F6",
    "countdown": "#F59E0B",
    "stopwatch": "#3B82F6",
    "completed": "#10B981",
}


def format_clock(seconds: int) -> str:
    """``125`` → ``"02:05"``.  Minutes are not wrapped at 60."""
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


def phase_text(state: TimerState) -> str:
    if state.completed:
        return "TIME'S UP!" if state.mode == TimerMode.COUNTDOWN else "COMPLETED!"
    if state.mode == TimerMode.STOPWATCH:
        return "STOPWATCH"
    if state.mode == TimerMode.COUNTDOWN:
        return "COUNTDOWN"
    return PHASE_LABELS[state.phase]


def phase_color(state: TimerState) -> str:
    if state.completed:
        return PHASE_COLORS["completed"]
    if state.mode == TimerMode.INTERVAL:
        return PHASE_COLORS[state.phase.value]
    return PHASE_COLORS[state.mode.value]


def round_text(state: TimerState) -> str:
    if state.mode != TimerMode.INTERVAL:
        return ""
    config = state.active_config
    parts = [
        f"Cycle {state.cycle_index}/{config.cycles}",
        f"Set {state.set_index}/{config.sets}",
    ]
    if state.sequence_active:
        parts.append(f"Block {state.sequence_index + 1}/{len(state.sequence)}")
    return " · ".join(parts)


class TimerWidget(QWidget):
    """The timer card."""

    def __init__(self, engine: TimerEngine, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._engine = engine
        self._build_ui()
        self._connect_signals()
        self.show_state(engine.state)

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        card = QFrame(self)
        card.setObjectName("card")
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(24, 20, 24, 24)
        layout.setSpacing(10)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._mode_combo = QComboBox(card)
        for mode, label in MODE_LABELS.items():
            self._mode_combo.addItem(label, mode.value)
        layout.addWidget(self._mode_combo)

        self._phase_label = QLabel(card)
        self._phase_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._phase_label)

        self._clock_label = QLabel(card)
        self._clock_label.setObjectName("clock")
        self._clock_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._clock_label.setStyleSheet("font-size: 72px; font-weight: 600;")
        layout.addWidget(self._clock_label)

        self._progress = QProgressBar(card)
        self._progress.setRange(0, 1000)
        self._progress.setTextVisible(False)
        layout.addWidget(self._progress)

        self._round_label = QLabel(card)
        self._round_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._round_label)

        btn_row = QHBoxLayout()
        btn_row.setSpacing(12)
        btn_row.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._reset_btn = QPushButton("Reset", card)
        self._reset_btn.setObjectName("secondaryButton")
        self._start_pause_btn = QPushButton("Start", card)
        self._start_pause_btn.setObjectName("primaryButton")
        btn_row.addWidget(self._reset_btn)
        btn_row.addWidget(self._start_pause_btn)
        layout.addLayout(btn_row)

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._start_pause_btn.clicked.connect(self._on_start_pause)
        self._reset_btn.clicked.connect(self._engine.reset)
        self._mode_combo.activated.connect(self._on_mode_selected)
        self._engine.state_changed.connect(self.show_state)

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_start_pause(self) -> None:
        if self._engine.state.running:
            self._engine.pause()
        else:
            self._engine.start()

    def _on_mode_selected(self, index: int) -> None:
        mode = TimerMode(self._mode_combo.itemData(index))
        if mode != self._engine.state.mode:
            self._engine.set_mode(mode)

    def show_state(self, state: TimerState) -> None:
        combo_index = self._mode_combo.findData(state.mode.value)
        if combo_index != self._mode_combo.currentIndex():
            self._mode_combo.setCurrentIndex(combo_index)

        self._phase_label.setText(phase_text(state))
        self._phase_label.setStyleSheet(
            f"font-size: 20px; font-weight: 700; color: {phase_color(state)};"
        )
        self._clock_label.setText(format_clock(state.display_seconds))
        self._progress.setVisible(state.mode != TimerMode.STOPWATCH)
        self._progress.setValue(round(state.percent_complete * 1000))
        self._round_label.setText(round_text(state))

        if state.running:
            self._start_pause_btn.setText("Pause")
        elif state.paused:
            self._start_pause_btn.setText("Resume")
        else:
            self._start_pause_btn.setText("Start")

    # ── read-only accessors (used by tests) ───────────────────────────────

    @property
    def displayed_clock(self) -> str:
        return self._clock_label.text()

    @property
    def displayed_phase(self) -> str:
        return self._phase_label.text()

    @property
    def displayed_round(self) -> str:
        return self._round_label.text()

    @property
    def start_pause_label(self) -> str:
        return self._start_pause_btn.text()
