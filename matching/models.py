"""
Purpose: Domain models for the Matching capability.
What it does:
- Defines core data structures:
- MatchRequest (request id, kind RIDE/BOOKING, created_at)
- StatusUpdate (normalized {status, assigned_driver_id} from either channel)
- MatchOutcome variants: Assigned, TimedOut, Cancelled

Defines enums/constants:
- MatchKind = RIDE | BOOKING
- MatchState = SEARCHING | ASSIGNED | TIMED_OUT | CANCELLED

Rule: No threads, no backend calls. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from drivers.models import DriverSnapshot

# rides report "accepted", scheduled bookings report "assigned"
ASSIGNED_STATUSES = frozenset({"accepted", "assigned"})


class MatchKind(str, Enum):
    RIDE = "ride"
    BOOKING = "booking"


class MatchState(str, Enum):
    SEARCHING = "searching"
    ASSIGNED = "assigned"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not MatchState.SEARCHING


@dataclass(frozen=True)
class MatchRequest:
    """
    The unit the coordinator tracks. Exists once the trip/booking record exists
    in the backend.
    """
    request_id: str
    kind: MatchKind = MatchKind.RIDE
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class StatusUpdate:
    """
    Normalized status report, whatever the backend payload looked like.
    """
    status: str
    assigned_driver_id: Optional[str] = None

    @property
    def is_assignment(self) -> bool:
        return bool(self.assigned_driver_id) and self.status.lower() in ASSIGNED_STATUSES


@dataclass(frozen=True)
class MatchOutcome:
    """
    Terminal result of one search. Exactly one per coordinator.
    """
    request_id: str

    @property
    def state(self) -> MatchState:
        raise NotImplementedError


@dataclass(frozen=True)
class Assigned(MatchOutcome):
    driver_id: str = ""
    driver_snapshot: Optional[DriverSnapshot] = None
    source: str = ""  # name of the watcher that won the race

    @property
    def state(self) -> MatchState:
        return MatchState.ASSIGNED


@dataclass(frozen=True)
class TimedOut(MatchOutcome):
    timeout_seconds: float = 0.0

    @property
    def state(self) -> MatchState:
        return MatchState.TIMED_OUT


@dataclass(frozen=True)
class Cancelled(MatchOutcome):
    reason: str = ""

    @property
    def state(self) -> MatchState:
        return MatchState.CANCELLED
