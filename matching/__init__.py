from .coordinator import DEFAULT_CANCEL_REASON, MatchingCoordinator
from .exceptions import InvalidMatchRequest, MatchStateException, TransientIOError
from .models import (
    ASSIGNED_STATUSES,
    Assigned,
    Cancelled,
    MatchKind,
    MatchOutcome,
    MatchRequest,
    MatchState,
    StatusUpdate,
    TimedOut,
)
from .policy import MatchingPolicy, default_matching_policy, web_matching_policy
from .service import MatchingService
from .watchers import PollWatcher, PushWatcher, Watcher, WatchHandle

__all__ = [
    "ASSIGNED_STATUSES",
    "DEFAULT_CANCEL_REASON",
    "Assigned",
    "Cancelled",
    "InvalidMatchRequest",
    "MatchKind",
    "MatchOutcome",
    "MatchRequest",
    "MatchState",
    "MatchStateException",
    "MatchingCoordinator",
    "MatchingPolicy",
    "MatchingService",
    "PollWatcher",
    "PushWatcher",
    "StatusUpdate",
    "TimedOut",
    "TransientIOError",
    "Watcher",
    "WatchHandle",
    "default_matching_policy",
    "web_matching_policy",
]
