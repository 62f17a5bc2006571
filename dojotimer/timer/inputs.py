"""Form input → validated configuration.

The engine assumes clean integers.  Anything typed into a field is
coerced here: non-numeric or negative text falls back to the field's
default, ``cycles``/``sets`` are floored at 1 and countdown seconds are
kept within 0–59.
"""

from __future__ import annotations

from .state import (
    DEFAULT_COUNTDOWN_MINUTES,
    DEFAULT_COUNTDOWN_SECONDS,
    DEFAULT_CYCLES,
    DEFAULT_REST_BETWEEN_SETS_SECONDS,
    DEFAULT_REST_SECONDS,
    DEFAULT_SETS,
    DEFAULT_WORK_SECONDS,
    CountdownConfig,
    IntervalConfig,
)


def coerce_int(value: object, default: int) -> int:
    """Parse *value* as a non-negative int, or return *default*."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        number = value
    else:
        try:
            number = int(str(value).strip())
        except (TypeError, ValueError):
            return default
    return number if number >= 0 else default


def interval_config_from_form(
    work: object,
    rest: object,
    cycles: object,
    sets: object,
    rest_between_sets: object,
    name: str | None = None,
) -> IntervalConfig:
    return IntervalConfig(
        work_seconds=coerce_int(work, DEFAULT_WORK_SECONDS),
        rest_seconds=coerce_int(rest, DEFAULT_REST_SECONDS),
        cycles=max(1, coerce_int(cycles, DEFAULT_CYCLES)),
        sets=max(1, coerce_int(sets, DEFAULT_SETS)),
        rest_between_sets_seconds=coerce_int(
            rest_between_sets, DEFAULT_REST_BETWEEN_SETS_SECONDS
        ),
        name=(name or "").strip() or None,
    )


def countdown_config_from_form(minutes: object, seconds: object) -> CountdownConfig:
    return CountdownConfig(
        minutes=coerce_int(minutes, DEFAULT_COUNTDOWN_MINUTES),
        seconds=min(59, coerce_int(seconds, DEFAULT_COUNTDOWN_SECONDS)),
    )


def sequence_entry_name(name: str | None, position: int) -> str:
    """Name for a new sequence entry; blank names become "Interval N"."""
    name = (name or "").strip()
    return name or f"Interval {position}"


def interval_config_from_dict(data: object) -> IntervalConfig:
    """Rebuild a stored config, tolerating missing or bad fields."""
    if not isinstance(data, dict):
        return IntervalConfig()
    config = interval_config_from_form(
        data.get("work_seconds"),
        data.get("rest_seconds"),
        data.get("cycles"),
        data.get("sets"),
        data.get("rest_between_sets_seconds"),
    )
    name = data.get("name")
    return IntervalConfig(
        work_seconds=config.work_seconds,
        rest_seconds=config.rest_seconds,
        cycles=config.cycles,
        sets=config.sets,
        rest_between_sets_seconds=config.rest_between_sets_seconds,
        name=name if isinstance(name, str) else None,
    )


def countdown_config_from_dict(data: object) -> CountdownConfig:
    if not isinstance(data, dict):
        return CountdownConfig()
    return countdown_config_from_form(data.get("minutes"), data.get("seconds"))
