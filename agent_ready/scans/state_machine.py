from __future__ import annotations

from typing import Dict, FrozenSet

from agent_ready.app.errors import InvalidScanTransitionError

# status -> statuses it may move to
TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "queued": frozenset({"cloning", "failed"}),
    "cloning": frozenset({"scanning", "failed"}),
    "scanning": frozenset({"completed", "failed"}),
    "completed": frozenset(),
    "failed": frozenset(),
}

TERMINAL = frozenset(s for s, nxt in TRANSITIONS.items() if not nxt)


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def assert_transition(current: str, target: str) -> None:
    if current not in TRANSITIONS:
        raise InvalidScanTransitionError(f"Unknown scan status: {current}")
    if not can_transition(current, target):
        raise InvalidScanTransitionError(f"Illegal scan transition: {current} -> {target}")


def is_terminal(status: str) -> bool:
    return status in TERMINAL
