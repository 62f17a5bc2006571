"""Configuration panel: interval form, countdown form, sequence list.

Every field is a free-text ``QLineEdit``; values go through
``timer.inputs`` before reaching the engine, so typing "abc" into
"Work" simply yields the default.
"""

from __future__ import annotations

from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QGroupBox,
    QLineEdit, QPushButton, QListWidget, QCheckBox,
)

from ..timer.engine import TimerEngine
from ..timer.inputs import (
    countdown_config_from_form,
    interval_config_from_form,
    sequence_entry_name,
)
from ..timer.state import CountdownConfig, IntervalConfig, TimerState


def describe(config: IntervalConfig) -> str:
    """One-line summary for the sequence list."""
    name = config.name or "Interval"
    summary = (
        f"{config.work_seconds}s/{config.rest_seconds}s × {config.cycles}"
    )
    if config.sets > 1:
        summary += f" × {config.sets} sets ({config.rest_between_sets_seconds}s between)"
    return f"{name}: {summary}"


class ConfigPanel(QWidget):
    """Edit the interval/countdown configuration and the sequence."""

    def __init__(self, engine: TimerEngine, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._engine = engine
        self._shown_sequence: tuple[IntervalConfig, ...] | None = None
        self._shown_interval: IntervalConfig | None = None
        self._shown_countdown: CountdownConfig | None = None
        self._build_ui()
        self._connect_signals()
        self.show_state(engine.state)

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(12)

        # ── interval ─────────────────────────────────────────────────
        interval_box = QGroupBox("Interval", self)
        form = QFormLayout(interval_box)
        self._name_edit = QLineEdit(interval_box)
        self._name_edit.setPlaceholderText("Name (optional)")
        self._work_edit = QLineEdit(interval_box)
        self._rest_edit = QLineEdit(interval_box)
        self._cycles_edit = QLineEdit(interval_box)
        self._sets_edit = QLineEdit(interval_box)
        self._set_rest_edit = QLineEdit(interval_box)
        form.addRow("Name", self._name_edit)
        form.addRow("Work (s)", self._work_edit)
        form.addRow("Rest (s)", self._rest_edit)
        form.addRow("Cycles", self._cycles_edit)
        form.addRow("Sets", self._sets_edit)
        form.addRow("Rest between sets (s)", self._set_rest_edit)
        self._apply_interval_btn = QPushButton("Apply", interval_box)
        form.addRow(self._apply_interval_btn)
        root.addWidget(interval_box)

        # ── countdown ────────────────────────────────────────────────
        countdown_box = QGroupBox("Countdown", self)
        countdown_form = QFormLayout(countdown_box)
        self._minutes_edit = QLineEdit(countdown_box)
        self._seconds_edit = QLineEdit(countdown_box)
        countdown_form.addRow("Minutes", self._minutes_edit)
        countdown_form.addRow("Seconds", self._seconds_edit)
        self._apply_countdown_btn = QPushButton("Apply", countdown_box)
        countdown_form.addRow(self._apply_countdown_btn)
        root.addWidget(countdown_box)

        # ── sequence ─────────────────────────────────────────────────
        sequence_box = QGroupBox("Sequence", self)
        seq_layout = QVBoxLayout(sequence_box)
        self._sequence_toggle = QCheckBox("Run as sequence", sequence_box)
        seq_layout.addWidget(self._sequence_toggle)
        self._sequence_list = QListWidget(sequence_box)
        seq_layout.addWidget(self._sequence_list)

        btn_row = QHBoxLayout()
        self._add_btn = QPushButton("Add", sequence_box)
        self._update_btn = QPushButton("Update", sequence_box)
        self._remove_btn = QPushButton("Remove", sequence_box)
        self._clear_btn = QPushButton("Clear", sequence_box)
        for btn in (self._add_btn, self._update_btn, self._remove_btn, self._clear_btn):
            btn_row.addWidget(btn)
        seq_layout.addLayout(btn_row)
        root.addWidget(sequence_box)

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._apply_interval_btn.clicked.connect(self._on_apply_interval)
        self._apply_countdown_btn.clicked.connect(self._on_apply_countdown)
        self._add_btn.clicked.connect(self._on_add)
        self._update_btn.clicked.connect(self._on_update)
        self._remove_btn.clicked.connect(self._on_remove)
        self._clear_btn.clicked.connect(self._engine.clear_sequence)
        self._sequence_toggle.clicked.connect(self._engine.set_sequence_mode_enabled)
        self._sequence_list.currentRowChanged.connect(self._on_row_selected)
        self._engine.state_changed.connect(self.show_state)

    # ── form helpers ──────────────────────────────────────────────────────

    def _form_config(self, name: str | None = None) -> IntervalConfig:
        return interval_config_from_form(
            self._work_edit.text(),
            self._rest_edit.text(),
            self._cycles_edit.text(),
            self._sets_edit.text(),
            self._set_rest_edit.text(),
            name=self._name_edit.text() if name is None else name,
        )

    def _fill_interval_form(self, config: IntervalConfig) -> None:
        self._name_edit.setText(config.name or "")
        self._work_edit.setText(str(config.work_seconds))
        self._rest_edit.setText(str(config.rest_seconds))
        self._cycles_edit.setText(str(config.cycles))
        self._sets_edit.setText(str(config.sets))
        self._set_rest_edit.setText(str(config.rest_between_sets_seconds))

    def _fill_countdown_form(self, config: CountdownConfig) -> None:
        self._minutes_edit.setText(str(config.minutes))
        self._seconds_edit.setText(str(config.seconds))

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_apply_interval(self) -> None:
        config = self._form_config()
        self._engine.update_interval_config(config)
        self._fill_interval_form(config)

    def _on_apply_countdown(self) -> None:
        config = countdown_config_from_form(
            self._minutes_edit.text(), self._seconds_edit.text(),
        )
        self._engine.update_countdown_config(config)
        self._fill_countdown_form(config)

    def _on_add(self) -> None:
        position = len(self._engine.state.sequence) + 1
        name = sequence_entry_name(self._name_edit.text(), position)
        self._engine.add_to_sequence(self._form_config(name))

    def _on_update(self) -> None:
        row = self._sequence_list.currentRow()
        if row < 0:
            return
        name = sequence_entry_name(self._name_edit.text(), row + 1)
        self._engine.update_in_sequence(row, self._form_config(name))

    def _on_remove(self) -> None:
        row = self._sequence_list.currentRow()
        if row >= 0:
            self._engine.remove_from_sequence(row)

    def _on_row_selected(self, row: int) -> None:
        sequence = self._engine.state.sequence
        if 0 <= row < len(sequence):
            self._fill_interval_form(sequence[row])

    def show_state(self, state: TimerState) -> None:
        # forms follow config changes, not every tick
        if state.interval_config != self._shown_interval:
            self._shown_interval = state.interval_config
            self._fill_interval_form(state.interval_config)
        if state.countdown_config != self._shown_countdown:
            self._shown_countdown = state.countdown_config
            self._fill_countdown_form(state.countdown_config)

        if state.sequence != self._shown_sequence:
            self._shown_sequence = state.sequence
            row = self._sequence_list.currentRow()
            self._sequence_list.blockSignals(True)
            self._sequence_list.clear()
            for config in state.sequence:
                self._sequence_list.addItem(describe(config))
            self._sequence_list.setCurrentRow(min(row, len(state.sequence) - 1))
            self._sequence_list.blockSignals(False)

        self._sequence_toggle.setChecked(state.sequence_mode_enabled)
        has_entries = bool(state.sequence)
        self._update_btn.setEnabled(has_entries)
        self._remove_btn.setEnabled(has_entries)
        self._clear_btn.setEnabled(has_entries)

    # ── read-only accessors (used by tests) ───────────────────────────────

    @property
    def sequence_rows(self) -> list[str]:
        return [
            self._sequence_list.item(i).text()
            for i in range(self._sequence_list.count())
        ]
