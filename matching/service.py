"""
Purpose: Entry point the booking flow talks to.
What it does:
Creates the ride/booking record in the backend, builds the watchers the policy
asks for, and hands back a started MatchingCoordinator. Also owns the
customer-facing cancel (local search + backend record) and the retry after a
timeout.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .coordinator import DEFAULT_CANCEL_REASON, MatchingCoordinator, OutcomeCallback
from .exceptions import InvalidMatchRequest
from .models import MatchKind, MatchRequest
from .policy import MatchingPolicy, default_matching_policy
from .ports import BookingBackend, ChangeNotifier, DriverDirectory, StatusReader
from .watchers import PollWatcher, PushWatcher, Watcher

logger = logging.getLogger(__name__)


class MatchingService:
    def __init__(
        self,
        backend: BookingBackend,
        notifier: Optional[ChangeNotifier] = None,
        status_reader: Optional[StatusReader] = None,
        driver_directory: Optional[DriverDirectory] = None,
        policy: Optional[MatchingPolicy] = None,
    ):
        self.backend = backend
        self.notifier = notifier
        self.status_reader = status_reader
        self.driver_directory = driver_directory
        self.policy = policy or default_matching_policy()
        self.policy.validate()

    def build_watchers(self) -> List[Watcher]:
        watchers: List[Watcher] = []

        if self.policy.use_push:
            if self.notifier is None:
                logger.warning("Push channel enabled but no notifier configured, skipping it")
            else:
                watchers.append(
                    PushWatcher(
                        self.notifier,
                        resubscribe_interval_seconds=self.policy.resubscribe_interval_seconds,
                    )
                )

        if self.policy.use_poll:
            if self.status_reader is None:
                logger.warning("Poll channel enabled but no status reader configured, skipping it")
            else:
                watchers.append(
                    PollWatcher(
                        self.status_reader,
                        self.policy.poll_interval_seconds,
                        poll_immediately=self.policy.initial_status_check,
                    )
                )

        if not watchers:
            raise InvalidMatchRequest("No watch channel could be built from the configured collaborators")
        return watchers

    def request_driver(
        self,
        kind: MatchKind = MatchKind.RIDE,
        payload: Optional[Dict[str, Any]] = None,
        on_outcome: Optional[OutcomeCallback] = None,
    ) -> MatchingCoordinator:
        """
        Create the record, then start searching for a driver for it.
        """
        match_request = self.backend.create_request(kind, payload)
        logger.info("Created %s %s", match_request.kind.value, match_request.request_id)
        return self.watch(match_request, on_outcome=on_outcome)

    def watch(self, match_request: MatchRequest, on_outcome: Optional[OutcomeCallback] = None) -> MatchingCoordinator:
        coordinator = MatchingCoordinator(
            match_request,
            self.build_watchers(),
            driver_directory=self.driver_directory,
            policy=self.policy,
            on_outcome=on_outcome,
        )
        return coordinator.start()

    def cancel(self, coordinator: MatchingCoordinator, reason: str = DEFAULT_CANCEL_REASON) -> bool:
        """
        Stop the local search first, then cancel the backend record.
        Backend failures propagate; the local search stays cancelled.
        """
        cancelled = coordinator.cancel(reason)
        if not cancelled:
            logger.info("Search for %s already ended, not cancelling", coordinator.request_id)
            return False

        try:
            self.backend.cancel_request(coordinator.request_id, reason)
        except Exception:
            logger.exception("Backend cancel failed for %s", coordinator.request_id)
            raise
        return True

    def retry(self, coordinator: MatchingCoordinator) -> MatchingCoordinator:
        """
        "Try again" after a timeout: a fresh search for the same record.
        """
        return coordinator.restart()
