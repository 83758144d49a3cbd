"""Status-state normalisation.

Generic backends and Harness Code disagree on what an unrecognised state
should become: the generic vocabulary has an explicit UNKNOWN, Harness
checks default to pending.
"""

from __future__ import annotations

from enum import Enum


class State(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"
    PENDING = "pending"
    RUNNING = "running"
    UNKNOWN = "unknown"


_ALIASES = {
    "success": State.SUCCESS,
    "failure": State.FAILURE,
    "failed": State.FAILURE,
    "error": State.ERROR,
    "pending": State.PENDING,
    "running": State.RUNNING,
}


def map_status_state(value: str | None) -> State:
    """Map a caller-supplied state string to the generic State vocabulary."""
    return _ALIASES.get((value or "").strip().lower(), State.UNKNOWN)


def map_harness_state(value: str | None) -> str:
    """Map a caller-supplied state string to a Harness Code check status."""
    state = map_status_state(value)
    if state is State.UNKNOWN:
        return State.PENDING.value
    return state.value
