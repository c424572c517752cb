"""Server lifecycle states.

The server has exactly one transition: it is constructed in
``not_started`` and moves to ``running`` once its socket is bound.
Termination is an external process kill, not a modeled state.
"""

from __future__ import annotations

from enum import StrEnum


class ServerState(StrEnum):
    """Lifecycle of an :class:`~tlsserve.infrastructure.listener.HttpsServer`."""

    NOT_STARTED = "not_started"
    RUNNING = "running"


SERVER_TRANSITIONS: dict[str, list[str]] = {
    "not_started": ["running"],
    "running": [],
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = SERVER_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed
