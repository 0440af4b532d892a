"""
Purpose: Orchestrator for one driver search (the "glue").
What it does:
Runs every configured watcher concurrently against one MatchRequest, starts the
search timer, and settles the search exactly once:

- first watcher to report an assignment -> Assigned (with a driver snapshot)
- timer fires first                      -> TimedOut
- caller cancels first                   -> Cancelled

All three paths go through _claim(), the single decision point. Claiming sets
the shared stop event so every watcher stops, unsubscribes and discards late
results. An assignment claims the slot before the driver lookup, so a slow
directory can neither let a later report win nor let the timer overtake it.
A finished coordinator is never reused: restart() builds a fresh one.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Sequence

from drivers.models import DriverSnapshot

from .exceptions import InvalidMatchRequest, MatchStateException
from .models import (
    Assigned,
    Cancelled,
    MatchOutcome,
    MatchRequest,
    MatchState,
    StatusUpdate,
    TimedOut,
)
from .policy import MatchingPolicy, default_matching_policy
from .ports import DriverDirectory
from .state_machine import can_transition, transition
from .watchers import Watcher, WatchHandle

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[MatchOutcome], None]

DEFAULT_CANCEL_REASON = "Cancelled by customer during driver search"


class MatchingCoordinator:
    """
    Watches one request until a driver is assigned, the search times out,
    or the caller cancels.
    """
    def __init__(
        self,
        match_request: MatchRequest,
        watchers: Sequence[Watcher],
        driver_directory: Optional[DriverDirectory] = None,
        policy: Optional[MatchingPolicy] = None,
        on_outcome: Optional[OutcomeCallback] = None,
    ):
        if not match_request.request_id:
            raise InvalidMatchRequest("request_id is required")
        if not watchers:
            raise InvalidMatchRequest("at least one watcher is required")

        self.match_request = match_request
        self.watchers = list(watchers)
        self.driver_directory = driver_directory
        self.policy = policy or default_matching_policy()
        self.policy.validate()
        self.on_outcome = on_outcome

        self._lock = threading.Lock()
        self._state = MatchState.SEARCHING
        self._outcome: Optional[MatchOutcome] = None
        self._started = False
        self._timer: Optional[threading.Timer] = None
        self._handles: List[WatchHandle] = []
        self._stop_event = threading.Event()
        self._done = threading.Event()

    @property
    def request_id(self) -> str:
        return self.match_request.request_id

    @property
    def state(self) -> MatchState:
        with self._lock:
            return self._state

    @property
    def outcome(self) -> Optional[MatchOutcome]:
        """None while searching, and briefly after ASSIGNED is claimed until the driver snapshot arrives."""
        with self._lock:
            return self._outcome

    def start(self) -> MatchingCoordinator:
        with self._lock:
            if self._started:
                raise MatchStateException(f"Search for {self.request_id} was already started; use restart()")
            self._started = True

            # cancelled before it ever ran
            if self._state.is_terminal:
                return self

            self._timer = threading.Timer(self.policy.search_timeout_seconds, self._on_timeout)
            self._timer.daemon = True
            self._timer.start()

        logger.info(
            "Searching for a driver for %s %s (timeout %ss, watchers: %s)",
            self.match_request.kind.value,
            self.request_id,
            self.policy.search_timeout_seconds,
            ", ".join(w.name for w in self.watchers),
        )

        for watcher in self.watchers:
            handle = watcher.start(self.match_request, self._on_report, self._stop_event)
            with self._lock:
                self._handles.append(handle)

        return self

    def cancel(self, reason: str = DEFAULT_CANCEL_REASON) -> bool:
        """
        Returns True if this call ended the search, False if it had already ended.
        """
        return self._settle(Cancelled(request_id=self.request_id, reason=reason))

    def restart(self) -> MatchingCoordinator:
        """
        Start a brand-new search for the same request after a timeout.
        """
        with self._lock:
            if self._state is not MatchState.TIMED_OUT:
                raise MatchStateException(
                    f"Only a timed-out search can be restarted ({self.request_id} is {self._state.value})"
                )

        fresh = MatchingCoordinator(
            self.match_request,
            self.watchers,
            driver_directory=self.driver_directory,
            policy=self.policy,
            on_outcome=self.on_outcome,
        )
        return fresh.start()

    def wait(self, timeout: Optional[float] = None) -> Optional[MatchOutcome]:
        """
        Block until the search settles. Returns None if timeout elapses first.
        """
        if not self._done.wait(timeout):
            return None
        return self.outcome

    def join(self, timeout: Optional[float] = None) -> None:
        """
        Wait for the timer and watcher threads to exit after the search settled.
        """
        with self._lock:
            handles = list(self._handles)
            timer = self._timer

        if timer is not None and timer is not threading.current_thread():
            timer.join(timeout)
        for handle in handles:
            handle.join(timeout)

    def active_watchers(self) -> int:
        with self._lock:
            handles = list(self._handles)
        return sum(1 for handle in handles if handle.is_active())

    # --- watcher / timer callbacks ---

    def _on_report(self, update: StatusUpdate, source: str) -> None:
        if not update.is_assignment:
            logger.debug("%s watcher saw status %r for %s", source, update.status, self.request_id)
            return

        driver_id = update.assigned_driver_id
        if not self._claim(MatchState.ASSIGNED):
            logger.debug("Ignoring %s report of %s for %s", source, driver_id, self.request_id)
            return

        # only the winning report gets here; the slot is already ours
        snapshot = self._lookup_driver(driver_id)
        self._publish(
            Assigned(
                request_id=self.request_id,
                driver_id=driver_id,
                driver_snapshot=snapshot,
                source=source,
            )
        )

    def _on_timeout(self) -> None:
        self._settle(TimedOut(request_id=self.request_id, timeout_seconds=self.policy.search_timeout_seconds))

    def _lookup_driver(self, driver_id: str) -> DriverSnapshot:
        if self.driver_directory is None:
            return DriverSnapshot.placeholder(driver_id)
        try:
            return self.driver_directory.get_driver_snapshot(driver_id)
        except Exception as error:
            logger.warning("Driver lookup for %s failed (%s), using placeholder", driver_id, error)
            return DriverSnapshot.placeholder(driver_id)

    def _claim(self, target: MatchState) -> bool:
        """
        The single decision point: move out of SEARCHING, stop every watcher and
        cancel the timer in one locked step. Exactly one caller ever gets True.
        """
        with self._lock:
            if not can_transition(self._state, target):
                logger.debug(
                    "Ignoring %s for %s: search already %s",
                    target.value,
                    self.request_id,
                    self._state.value,
                )
                return False

            self._state = transition(self._state, target)
            self._stop_event.set()
            if self._timer is not None:
                self._timer.cancel()
        return True

    def _publish(self, outcome: MatchOutcome) -> None:
        with self._lock:
            self._outcome = outcome

        logger.info("Search for %s ended: %s", self.request_id, outcome.state.value)
        self._done.set()

        if self.on_outcome is not None:
            try:
                self.on_outcome(outcome)
            except Exception:
                logger.exception("Outcome callback failed for %s", self.request_id)

    def _settle(self, outcome: MatchOutcome) -> bool:
        if not self._claim(outcome.state):
            return False
        self._publish(outcome)
        return True
