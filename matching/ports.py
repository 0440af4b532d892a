"""
Purpose: The narrow contracts the matching core needs from the outside world.
What it does:
Declares the collaborator shapes (booking backend, push notifier, status reader,
driver directory). Concrete transports live outside this repository; tests use
in-memory fakes.

Every collaborator may raise TransientIOError for retryable network failures.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Protocol

from drivers.models import DriverSnapshot

from .models import MatchKind, MatchRequest, StatusUpdate

UpdateCallback = Callable[[StatusUpdate], None]


class Subscription(Protocol):
    def unsubscribe(self) -> None:
        ...


class ChangeNotifier(Protocol):
    """Push channel: calls on_update for every backend change to the request."""
    def subscribe(self, request_id: str, on_update: UpdateCallback) -> Subscription:
        ...


class StatusReader(Protocol):
    """Poll channel: one status read."""
    def poll(self, request_id: str) -> StatusUpdate:
        ...


class DriverDirectory(Protocol):
    def get_driver_snapshot(self, driver_id: str) -> DriverSnapshot:
        ...


class BookingBackend(Protocol):
    def create_request(self, kind: MatchKind, payload: Optional[Dict[str, Any]] = None) -> MatchRequest:
        ...

    def cancel_request(self, request_id: str, reason: str) -> None:
        """Idempotent: cancelling an already-cancelled request is not an error."""
        ...
