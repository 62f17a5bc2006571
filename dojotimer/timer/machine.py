"""Pure transition functions for the timer state machine.

Every function takes a ``TimerState`` and returns a new one; ``tick``
also returns the effects the shell must execute (audio cue, signals).
Nothing here touches Qt, the database or the clock, so the whole state
machine can be driven step by step from tests.

Modes
-----
STOPWATCH   elapsed_seconds counts up forever.
COUNTDOWN   remaining_seconds counts down; the tick *after* it reaches
            0 completes the timer.
INTERVAL    WORK → REST per cycle, SET_REST between sets, then the next
            sequence entry (sequence mode) or completion.

Interval phase transitions
--------------------------
WORK      → REST                                     (work ends)
REST      → WORK, cycle + 1                          (cycles left)
REST      → SET_REST                                 (last cycle, sets left)
REST      → next sequence entry | completed          (last cycle, last set)
SET_REST  → WORK, set + 1, cycle = 1                 (sets left)
SET_REST  → next sequence entry | completed          (no sets left)
"""

from __future__ import annotations

from dataclasses import replace

from .state import (
    CUE_WINDOW,
    ConfigurationSnapshot,
    CountdownConfig,
    Effect,
    IntervalConfig,
    TimerMode,
    TimerState,
)


# ══════════════════════════════════════════════════════════════════════════
#  CONSTRUCTION
# ══════════════════════════════════════════════════════════════════════════


def initial_state(snapshot: ConfigurationSnapshot | None = None) -> TimerState:
    """Build the idle state for a persisted configuration."""
    snapshot = snapshot or ConfigurationSnapshot()
    state = TimerState(
        mode=snapshot.mode,
        interval_config=snapshot.interval_config,
        countdown_config=snapshot.countdown_config,
        sequence=tuple(snapshot.sequence),
        sequence_mode_enabled=snapshot.sequence_mode_enabled,
    )
    return reinitialise(state)


def reinitialise(state: TimerState, mode: TimerMode | None = None) -> TimerState:
    """Idle state for *mode* (default: the current mode), configs kept."""
    mode = mode or state.mode
    state = replace(
        state,
        mode=mode,
        running=False,
        paused=False,
        completed=False,
        cycle_index=1,
        set_index=1,
        work_phase_active=True,
        set_rest_active=False,
        sequence_index=0,
    )
    if mode == TimerMode.STOPWATCH:
        return replace(state, elapsed_seconds=0)
    if mode == TimerMode.COUNTDOWN:
        return replace(state, remaining_seconds=state.countdown_config.total_seconds)
    return replace(state, remaining_seconds=state.active_config.work_seconds)


def apply_configuration(
    state: TimerState, snapshot: ConfigurationSnapshot
) -> TimerState:
    """Swap in a whole configuration and return to idle."""
    state = replace(
        state,
        mode=snapshot.mode,
        interval_config=snapshot.interval_config,
        countdown_config=snapshot.countdown_config,
        sequence=tuple(snapshot.sequence),
        sequence_mode_enabled=snapshot.sequence_mode_enabled,
    )
    return reinitialise(state)


# ══════════════════════════════════════════════════════════════════════════
#  COMMANDS
# ══════════════════════════════════════════════════════════════════════════


def set_mode(state: TimerState, mode: TimerMode) -> TimerState:
    return reinitialise(state, mode)


def reset(state: TimerState) -> TimerState:
    return reinitialise(state)


def start(state: TimerState) -> TimerState:
    """Resume counting from wherever the clock is; never a restart."""
    return replace(state, running=True, paused=False, completed=False)


def pause(state: TimerState) -> TimerState:
    return replace(state, running=False, paused=True)


def update_interval_config(state: TimerState, config: IntervalConfig) -> TimerState:
    state = replace(state, interval_config=config)
    if state.mode == TimerMode.INTERVAL and not state.in_session:
        return reinitialise(state)
    return clamp_progress(state)


def update_countdown_config(state: TimerState, config: CountdownConfig) -> TimerState:
    state = replace(state, countdown_config=config)
    if state.mode == TimerMode.COUNTDOWN:
        state = replace(state, remaining_seconds=config.total_seconds)
    return state


def clamp_progress(state: TimerState) -> TimerState:
    """Pull the sequence index and interval counters back inside bounds.

    Needed whenever the active config can change under a live session
    (config edits, sequence edits).
    """
    index = state.sequence_index
    if state.sequence:
        index = min(index, len(state.sequence) - 1)
    else:
        index = 0
    state = replace(state, sequence_index=index)

    config = state.active_config
    return replace(
        state,
        cycle_index=max(1, min(state.cycle_index, config.cycles)),
        set_index=max(1, min(state.set_index, config.sets)),
    )


# ══════════════════════════════════════════════════════════════════════════
#  TICK
# ══════════════════════════════════════════════════════════════════════════


def tick(state: TimerState) -> tuple[TimerState, tuple[Effect, ...]]:
    """Evaluate one clock pulse.  No-op unless running and not paused."""
    if not state.running or state.paused:
        return state, ()

    if state.mode == TimerMode.STOPWATCH:
        return replace(state, elapsed_seconds=state.elapsed_seconds + 1), ()

    if state.mode == TimerMode.COUNTDOWN:
        if state.remaining_seconds > 0:
            return _count_down(state)
        return _complete(state), (Effect.COMPLETED,)

    # INTERVAL
    effects: tuple[Effect, ...] = ()
    if state.remaining_seconds > 0:
        state, effects = _count_down(state)
        if state.remaining_seconds > 0:
            return state, effects
    state, transition_effects = phase_transition(state)
    return state, effects + transition_effects


def _count_down(state: TimerState) -> tuple[TimerState, tuple[Effect, ...]]:
    remaining = state.remaining_seconds - 1
    effects = (Effect.COUNTDOWN_CUE,) if remaining in CUE_WINDOW else ()
    return replace(state, remaining_seconds=remaining), effects


def _complete(state: TimerState) -> TimerState:
    return replace(state, running=False, completed=True)


def phase_transition(state: TimerState) -> tuple[TimerState, tuple[Effect, ...]]:
    """Advance the interval timer at the end of a phase."""
    config = state.active_config

    if state.set_rest_active:
        if state.set_index < config.sets:
            state = replace(
                state,
                set_index=state.set_index + 1,
                cycle_index=1,
                work_phase_active=True,
                set_rest_active=False,
                remaining_seconds=config.work_seconds,
            )
            return state, (Effect.PHASE_CHANGED,)
        return sequence_advance_or_complete(state)

    if state.work_phase_active:
        state = replace(
            state,
            work_phase_active=False,
            remaining_seconds=config.rest_seconds,
        )
        return state, (Effect.PHASE_CHANGED,)

    # rest phase ending
    if state.cycle_index < config.cycles:
        state = replace(
            state,
            cycle_index=state.cycle_index + 1,
            work_phase_active=True,
            remaining_seconds=config.work_seconds,
        )
        return state, (Effect.PHASE_CHANGED,)
    if state.set_index < config.sets:
        state = replace(
            state,
            set_rest_active=True,
            remaining_seconds=config.rest_between_sets_seconds,
        )
        return state, (Effect.PHASE_CHANGED,)
    return sequence_advance_or_complete(state)


def sequence_advance_or_complete(
    state: TimerState,
) -> tuple[TimerState, tuple[Effect, ...]]:
    """Load the next sequence entry, or finish the session."""
    if state.sequence_active and state.sequence_index + 1 < len(state.sequence):
        index = state.sequence_index + 1
        config = state.sequence[index]
        state = replace(
            state,
            sequence_index=index,
            cycle_index=1,
            set_index=1,
            work_phase_active=True,
            set_rest_active=False,
            remaining_seconds=config.work_seconds,
            running=True,
            completed=False,
        )
        return state, (Effect.PHASE_CHANGED, Effect.SEQUENCE_ADVANCED)
    return _complete(state), (Effect.COMPLETED,)
