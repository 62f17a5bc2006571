"""Shared test helpers for DojoTimer."""

from dojotimer.timer import machine
from dojotimer.timer.state import ConfigurationSnapshot, TimerState


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeAudio:
    """Audio cue adapter that counts cues, optionally failing each one."""

    def __init__(self, fail: bool = False):
        self.cues = 0
        self.fail = fail

    def play_cue(self):
        self.cues += 1
        if self.fail:
            raise RuntimeError("no audio device")


class FakeStore:
    """Persistence adapter recording ``save`` calls."""

    def __init__(self, snapshot: ConfigurationSnapshot | None = None, fail: bool = False):
        self.snapshot = snapshot or ConfigurationSnapshot()
        self.saves: list[dict] = []
        self.fail = fail

    def load(self):
        return self.snapshot

    def save(self, **fields):
        self.saves.append(fields)
        if self.fail:
            raise OSError("disk full")

    @property
    def saved_keys(self) -> list[str]:
        return [key for fields in self.saves for key in sorted(fields)]


def run_ticks(state: TimerState, count: int):
    """Apply *count* pure ticks; return the final state and all effects."""
    effects = []
    for _ in range(count):
        state, step = machine.tick(state)
        effects.extend(step)
    return state, effects


def tick_engine(engine, count: int) -> None:
    for _ in range(count):
        engine.tick()


def assert_invariants(state: TimerState) -> None:
    config = state.active_config
    assert 1 <= state.cycle_index <= config.cycles
    assert 1 <= state.set_index <= config.sets
    assert not (state.running and state.paused)
    if state.completed:
        assert not state.running
    if state.sequence_mode_enabled and state.sequence:
        assert 0 <= state.sequence_index < len(state.sequence)
    assert not (state.work_phase_active and state.set_rest_active)
