"""Value types for the DojoTimer state machine.

Everything here is immutable.  The engine never mutates a ``TimerState``
in place; each command or tick produces a new snapshot with
``dataclasses.replace``, so whatever the UI holds is read-only by
construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


# ── enums ─────────────────────────────────────────────────────────────────


class TimerMode(Enum):
    STOPWATCH = "stopwatch"
    COUNTDOWN = "countdown"
    INTERVAL = "interval"


class Phase(Enum):
    WORK = "work"
    REST = "rest"
    SET_REST = "set_rest"


class Effect(Enum):
    """Side effects requested by a tick, executed by the engine shell."""

    COUNTDOWN_CUE = "countdown_cue"
    PHASE_CHANGED = "phase_changed"
    SEQUENCE_ADVANCED = "sequence_advanced"
    COMPLETED = "completed"


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_WORK_SECONDS = 20
DEFAULT_REST_SECONDS = 10
DEFAULT_CYCLES = 8
DEFAULT_SETS = 1
DEFAULT_REST_BETWEEN_SETS_SECONDS = 60
DEFAULT_INTERVAL_NAME = "Tabata"

DEFAULT_COUNTDOWN_MINUTES = 5
DEFAULT_COUNTDOWN_SECONDS = 0

CUE_WINDOW = range(1, 4)  # beep on 3, 2, 1


# ── configuration ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class IntervalConfig:
    """One interval ("Tabata") block: ``sets`` × ``cycles`` × (work + rest)."""

    work_seconds: int = DEFAULT_WORK_SECONDS
    rest_seconds: int = DEFAULT_REST_SECONDS
    cycles: int = DEFAULT_CYCLES
    sets: int = DEFAULT_SETS
    rest_between_sets_seconds: int = DEFAULT_REST_BETWEEN_SETS_SECONDS
    name: str | None = DEFAULT_INTERVAL_NAME

    @property
    def total_seconds(self) -> int:
        """Wall-clock length of the whole block, set rests included."""
        per_set = self.cycles * (self.work_seconds + self.rest_seconds)
        return per_set * self.sets + self.rest_between_sets_seconds * (self.sets - 1)

    def to_dict(self) -> dict:
        return {
            "work_seconds": self.work_seconds,
            "rest_seconds": self.rest_seconds,
            "cycles": self.cycles,
            "sets": self.sets,
            "rest_between_sets_seconds": self.rest_between_sets_seconds,
            "name": self.name,
        }


@dataclass(frozen=True)
class CountdownConfig:
    minutes: int = DEFAULT_COUNTDOWN_MINUTES
    seconds: int = DEFAULT_COUNTDOWN_SECONDS

    @property
    def total_seconds(self) -> int:
        return self.minutes * 60 + self.seconds

    def to_dict(self) -> dict:
        return {"minutes": self.minutes, "seconds": self.seconds}


@dataclass(frozen=True)
class ConfigurationSnapshot:
    """The persisted slice of ``TimerState``, configuration only."""

    mode: TimerMode = TimerMode.INTERVAL
    interval_config: IntervalConfig = field(default_factory=IntervalConfig)
    countdown_config: CountdownConfig = field(default_factory=CountdownConfig)
    sequence: tuple[IntervalConfig, ...] = ()
    sequence_mode_enabled: bool = False

    def as_fields(self) -> dict:
        """Keyword form accepted by ``ConfigStore.save``."""
        return {
            "mode": self.mode,
            "interval_config": self.interval_config,
            "countdown_config": self.countdown_config,
            "sequence": self.sequence,
            "sequence_mode_enabled": self.sequence_mode_enabled,
        }


# ── runtime state ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TimerState:
    """Complete timer snapshot.

    ``remaining_seconds`` drives countdown and interval modes,
    ``elapsed_seconds`` drives the stopwatch.  The interval counters
    (``cycle_index``, ``set_index``, phase flags) sit at their initial
    values in the other two modes.
    """

    mode: TimerMode = TimerMode.INTERVAL
    interval_config: IntervalConfig = field(default_factory=IntervalConfig)
    countdown_config: CountdownConfig = field(default_factory=CountdownConfig)
    sequence: tuple[IntervalConfig, ...] = ()
    sequence_index: int = 0
    sequence_mode_enabled: bool = False

    running: bool = False
    paused: bool = False
    completed: bool = False

    remaining_seconds: int = DEFAULT_WORK_SECONDS
    elapsed_seconds: int = 0

    cycle_index: int = 1
    set_index: int = 1
    work_phase_active: bool = True
    set_rest_active: bool = False

    # ── derived ───────────────────────────────────────────────────────

    @property
    def sequence_active(self) -> bool:
        return self.sequence_mode_enabled and len(self.sequence) > 0

    @property
    def active_config(self) -> IntervalConfig:
        """The interval block currently in effect."""
        if self.sequence_active:
            return self.sequence[self.sequence_index]
        return self.interval_config

    @property
    def in_session(self) -> bool:
        """True between ``start()`` and completion/reset, paused included."""
        return self.running or self.paused

    @property
    def phase(self) -> Phase | None:
        if self.mode != TimerMode.INTERVAL:
            return None
        if self.set_rest_active:
            return Phase.SET_REST
        return Phase.WORK if self.work_phase_active else Phase.REST

    @property
    def phase_duration(self) -> int:
        """Full length of the phase ``remaining_seconds`` counts down."""
        if self.mode == TimerMode.COUNTDOWN:
            return self.countdown_config.total_seconds
        if self.mode == TimerMode.STOPWATCH:
            return 0
        config = self.active_config
        return {
            Phase.WORK: config.work_seconds,
            Phase.REST: config.rest_seconds,
            Phase.SET_REST: config.rest_between_sets_seconds,
        }[self.phase]

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the current phase."""
        duration = self.phase_duration
        if duration <= 0:
            return 0.0
        elapsed = duration - self.remaining_seconds
        return max(0.0, min(1.0, elapsed / duration))

    @property
    def display_seconds(self) -> int:
        if self.mode == TimerMode.STOPWATCH:
            return self.elapsed_seconds
        return self.remaining_seconds

    def configuration(self) -> ConfigurationSnapshot:
        return ConfigurationSnapshot(
            mode=self.mode,
            interval_config=self.interval_config,
            countdown_config=self.countdown_config,
            sequence=self.sequence,
            sequence_mode_enabled=self.sequence_mode_enabled,
        )
