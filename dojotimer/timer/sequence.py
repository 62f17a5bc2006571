"""Sequence controller: edits to the ordered list of interval blocks.

These only rewrite ``sequence``, ``sequence_index`` and
``sequence_mode_enabled``.  A session in progress keeps running; if the
edit changes the block it is currently in, the interval counters are
clamped to the new block.  When idle in interval mode the display is
re-primed with the (possibly new) first block.
"""

from __future__ import annotations

from dataclasses import replace

from .machine import clamp_progress, reinitialise
from .state import IntervalConfig, TimerMode, TimerState


def _settle(state: TimerState) -> TimerState:
    if state.mode == TimerMode.INTERVAL and not state.in_session:
        return reinitialise(state)
    return clamp_progress(state)


def append(state: TimerState, config: IntervalConfig) -> TimerState:
    return _settle(replace(state, sequence=state.sequence + (config,)))


def remove_at(state: TimerState, index: int) -> TimerState:
    """Drop one entry.  Out-of-range indices are ignored.

    Removing at or before the current position shifts the position back
    by one so it keeps pointing inside the list.
    """
    if not 0 <= index < len(state.sequence):
        return state
    sequence = state.sequence[:index] + state.sequence[index + 1:]
    position = state.sequence_index
    if index <= position and position > 0:
        position -= 1
    return _settle(replace(state, sequence=sequence, sequence_index=position))


def replace_at(state: TimerState, index: int, config: IntervalConfig) -> TimerState:
    if not 0 <= index < len(state.sequence):
        return state
    sequence = state.sequence[:index] + (config,) + state.sequence[index + 1:]
    return _settle(replace(state, sequence=sequence))


def clear(state: TimerState) -> TimerState:
    return _settle(
        replace(state, sequence=(), sequence_index=0, sequence_mode_enabled=False)
    )


def set_enabled(state: TimerState, enabled: bool) -> TimerState:
    if enabled:
        state = replace(state, sequence_mode_enabled=True, sequence_index=0)
    else:
        state = replace(state, sequence_mode_enabled=False)
    return _settle(state)
