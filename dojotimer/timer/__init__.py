"""Timer package."""

from .engine import TimerEngine, TICK_INTERVAL_MS
from .state import (
    TimerState,
    TimerMode,
    Phase,
    Effect,
    IntervalConfig,
    CountdownConfig,
    ConfigurationSnapshot,
)

__all__ = [
    "TimerEngine",
    "TICK_INTERVAL_MS",
    "TimerState",
    "TimerMode",
    "Phase",
    "Effect",
    "IntervalConfig",
    "CountdownConfig",
    "ConfigurationSnapshot",
]
