"""
Purpose: The two interchangeable ways of noticing that a driver was assigned.
What it does:

- PushWatcher: subscribes to backend change events for the request
- PollWatcher: reads the request status on a fixed interval

Both implement Watcher.start(request, report, stop_event) -> WatchHandle and run on
their own daemon thread. stop_event belongs to the coordinator: once it is set a
watcher makes no further external call, discards any in-flight result and exits.

Transient read/subscribe failures are logged and retried on the next tick; a
watcher never decides the outcome of a search by itself.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .models import MatchRequest, StatusUpdate
from .ports import ChangeNotifier, StatusReader, Subscription

logger = logging.getLogger(__name__)

ReportCallback = Callable[[StatusUpdate, str], None]


class WatchHandle:
    """
    The running instance of one watcher for one coordinator. Never reused.
    """
    def __init__(self, name: str, thread: threading.Thread):
        self.name = name
        self._thread = thread

    def start(self) -> WatchHandle:
        self._thread.start()
        return self

    def is_active(self) -> bool:
        return self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is threading.current_thread():
            return
        self._thread.join(timeout)


class Watcher(ABC):
    """
    A reusable watch strategy. start() creates a fresh WatchHandle every time.
    """
    name = "watcher"

    @abstractmethod
    def start(self, request: MatchRequest, report: ReportCallback, stop_event: threading.Event) -> WatchHandle:
        raise NotImplementedError


class PollWatcher(Watcher):
    name = "poll"

    def __init__(self, reader: StatusReader, interval_seconds: float = 2.0, *, poll_immediately: bool = False):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.reader = reader
        self.interval_seconds = interval_seconds
        self.poll_immediately = poll_immediately

    def start(self, request: MatchRequest, report: ReportCallback, stop_event: threading.Event) -> WatchHandle:
        thread = threading.Thread(
            target=self._run,
            args=(request, report, stop_event),
            name=f"poll-{request.request_id}",
            daemon=True,
        )
        return WatchHandle(self.name, thread).start()

    def _run(self, request: MatchRequest, report: ReportCallback, stop_event: threading.Event) -> None:
        if self.poll_immediately and not stop_event.is_set():
            self._poll_once(request, report, stop_event)

        while not stop_event.wait(self.interval_seconds):
            self._poll_once(request, report, stop_event)

    def _poll_once(self, request: MatchRequest, report: ReportCallback, stop_event: threading.Event) -> None:
        try:
            update = self.reader.poll(request.request_id)
        except Exception as error:
            logger.warning("Status poll for %s failed (%s), will retry", request.request_id, error)
            return

        # the search may have ended while the read was in flight
        if stop_event.is_set():
            return

        if update is not None:
            report(update, self.name)


class PushWatcher(Watcher):
    name = "push"

    def __init__(self, notifier: ChangeNotifier, *, resubscribe_interval_seconds: float = 5.0):
        if resubscribe_interval_seconds <= 0:
            raise ValueError("resubscribe_interval_seconds must be > 0")
        self.notifier = notifier
        self.resubscribe_interval_seconds = resubscribe_interval_seconds

    def start(self, request: MatchRequest, report: ReportCallback, stop_event: threading.Event) -> WatchHandle:
        thread = threading.Thread(
            target=self._run,
            args=(request, report, stop_event),
            name=f"push-{request.request_id}",
            daemon=True,
        )
        return WatchHandle(self.name, thread).start()

    def _run(self, request: MatchRequest, report: ReportCallback, stop_event: threading.Event) -> None:
        def on_update(update: StatusUpdate) -> None:
            if stop_event.is_set():
                return
            report(update, self.name)

        subscription: Optional[Subscription] = None
        while not stop_event.is_set():
            try:
                subscription = self.notifier.subscribe(request.request_id, on_update)
                break
            except Exception as error:
                logger.warning("Subscribe for %s failed (%s), will retry", request.request_id, error)
                if stop_event.wait(self.resubscribe_interval_seconds):
                    break

        if subscription is None:
            return

        logger.debug("Subscribed to updates for %s", request.request_id)
        stop_event.wait()

        try:
            subscription.unsubscribe()
        except Exception as error:
            logger.warning("Unsubscribe for %s failed (%s)", request.request_id, error)
