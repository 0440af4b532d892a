import threading
import time

import pytest

from drivers.models import DriverSnapshot, VehicleInfo
from matching.exceptions import TransientIOError
from matching.models import MatchKind, MatchRequest, StatusUpdate
from matching.policy import MatchingPolicy
from matching.watchers import Watcher, WatchHandle


class MockStatusReader:
    """Poll channel. Reports "searching" until assign() is called."""
    def __init__(self, failures=0):
        self.failures = failures
        self.calls = 0
        self.status = "searching"
        self.driver_id = None
        self._lock = threading.Lock()

    def assign(self, driver_id, status="accepted"):
        with self._lock:
            self.status = status
            self.driver_id = driver_id

    def poll(self, request_id):
        with self._lock:
            self.calls += 1
            if self.calls <= self.failures:
                raise TransientIOError("network unreachable")
            return StatusUpdate(self.status, self.driver_id)


class MockSubscription:
    def __init__(self):
        self.unsubscribed = threading.Event()

    def unsubscribe(self):
        self.unsubscribed.set()


class MockChangeNotifier:
    """Push channel. The test drives events through push()."""
    def __init__(self, failures=0):
        self.failures = failures
        self.attempts = 0
        self.callback = None
        self.subscription = None
        self.subscribed = threading.Event()

    def subscribe(self, request_id, on_update):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise TransientIOError("realtime socket closed")
        self.callback = on_update
        self.subscription = MockSubscription()
        self.subscribed.set()
        return self.subscription

    def push(self, status, driver_id=None):
        self.callback(StatusUpdate(status, driver_id))


class MockDriverDirectory:
    def __init__(self, error=None, delays=None):
        self.error = error
        # seconds to stall before answering, per driver id
        self.delays = delays or {}
        self.lookups = []

    def get_driver_snapshot(self, driver_id):
        self.lookups.append(driver_id)
        if driver_id in self.delays:
            time.sleep(self.delays[driver_id])
        if self.error:
            raise self.error
        return DriverSnapshot(
            driver_id=driver_id,
            name=f"Driver {driver_id}",
            phone="+919800000000",
            vehicle=VehicleInfo(make="Maruti", model="Dzire", registration="TN70AB1234", vehicle_type="sedan"),
            rating=4.8,
            total_rides=120,
        )


class MockBookingBackend:
    def __init__(self, cancel_error=None):
        self.cancel_error = cancel_error
        self.created = []
        self.cancelled = []

    def create_request(self, kind, payload=None):
        request = MatchRequest(request_id=f"{kind.value}_{len(self.created) + 1}", kind=kind)
        self.created.append((request, payload))
        return request

    def cancel_request(self, request_id, reason):
        self.cancelled.append((request_id, reason))
        if self.cancel_error:
            raise self.cancel_error


class MockWatcher(Watcher):
    """Hands the report callback to the test instead of watching anything."""
    def __init__(self, name="mock"):
        self.name = name
        self.report = None
        self.stop_event = None
        self.starts = 0

    def start(self, request, report, stop_event):
        self.starts += 1
        self.report = report
        self.stop_event = stop_event
        thread = threading.Thread(target=stop_event.wait, daemon=True)
        return WatchHandle(self.name, thread).start()


@pytest.fixture
def match_request():
    return MatchRequest(request_id="ride_42", kind=MatchKind.RIDE)


@pytest.fixture
def reader():
    return MockStatusReader()


@pytest.fixture
def notifier():
    return MockChangeNotifier()


@pytest.fixture
def directory():
    return MockDriverDirectory()


@pytest.fixture
def backend():
    return MockBookingBackend()


@pytest.fixture
def fast_policy():
    # short timings so the suite runs in well under a second per test
    return MatchingPolicy(
        search_timeout_seconds=5.0,
        poll_interval_seconds=0.02,
        resubscribe_interval_seconds=0.02,
    )
