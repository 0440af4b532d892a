from typing import Dict, FrozenSet

from .exceptions import MatchStateException
from .models import MatchState

ALLOWED_TRANSITIONS: Dict[MatchState, FrozenSet[MatchState]] = {
    MatchState.SEARCHING: frozenset({MatchState.ASSIGNED, MatchState.TIMED_OUT, MatchState.CANCELLED}),
    MatchState.ASSIGNED: frozenset(),
    MatchState.TIMED_OUT: frozenset(),
    MatchState.CANCELLED: frozenset(),
}


def can_transition(current: MatchState, target: MatchState) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def transition(current: MatchState, target: MatchState) -> MatchState:
    """
    Searching -> {Assigned, TimedOut, Cancelled}. Terminal states never move.
    Callers hold the coordinator lock; this only enforces the graph.
    """
    if not can_transition(current, target):
        raise MatchStateException(f"Cannot transition match from {current.value} to {target.value}")
    return target
