import csv
import logging
import os
import random
import threading
import uuid
from typing import Dict, List

from drivers.models import DriverSnapshot
from matching.models import MatchKind, MatchRequest, MatchState, StatusUpdate, TimedOut
from matching.policy import MatchingPolicy
from matching.service import MatchingService
from pricing.engine import FareCalculator
from pricing.models import AirportDirection, FareRequest, RentalPackage, ServiceType, VehicleClass
from pricing.policy import default_pricing_policy
from pricing.quote_service import QuoteService
from pricing.tables import FareTables, OutstationRate, OutstationSlab, RentalRate, default_fare_tables
from routing.geo import Coordinate
from routing.geofence import INNER_RING, OUTER_RING, Zone
from routing.osrm_client import OSRMClient
from routing.route_service import RouteService


class InMemoryZoneRepository:
    def __init__(self, hub: Coordinate):
        self.zones = [
            Zone(INNER_RING, hub, radius_km=5.0),
            Zone(OUTER_RING, hub, radius_km=25.0),
        ]

    def get_active_zones(self):
        return self.zones


class InMemorySubscription:
    def __init__(self, backend, request_id, on_update):
        self.backend = backend
        self.request_id = request_id
        self.on_update = on_update

    def unsubscribe(self):
        self.backend.remove_listener(self.request_id, self.on_update)


class InMemoryBookingBackend:
    """
    Plays the backend, the push channel and the poll channel at once.
    A random driver accepts each request after a random delay (or never).
    """
    def __init__(self, driver_ids: List[str], accept_probability=0.7, max_accept_delay=3.0):
        self.driver_ids = driver_ids
        self.accept_probability = accept_probability
        self.max_accept_delay = max_accept_delay
        self._records: Dict[str, Dict] = {}
        self._listeners: Dict[str, List] = {}
        self._lock = threading.Lock()

    def create_request(self, kind, payload=None):
        request_id = f"{kind.value}_{uuid.uuid4().hex[:8]}"
        with self._lock:
            self._records[request_id] = {"kind": kind, "status": "searching", "driver_id": None}
        self._schedule_acceptance(request_id)
        return MatchRequest(request_id=request_id, kind=kind)

    def _schedule_acceptance(self, request_id):
        if random.random() >= self.accept_probability:
            return
        delay = random.uniform(0.5, self.max_accept_delay)
        timer = threading.Timer(delay, self._accept, args=(request_id, random.choice(self.driver_ids)))
        timer.daemon = True
        timer.start()

    def _accept(self, request_id, driver_id):
        with self._lock:
            record = self._records[request_id]
            if record["status"] != "searching":
                return
            record["status"] = "assigned" if record["kind"] is MatchKind.BOOKING else "accepted"
            record["driver_id"] = driver_id
            update = StatusUpdate(record["status"], driver_id)
            listeners = list(self._listeners.get(request_id, []))

        for on_update in listeners:
            on_update(update)

    def reopen(self, request_id):
        """A customer pressed "try again": give drivers another chance."""
        self._schedule_acceptance(request_id)

    def cancel_request(self, request_id, reason):
        with self._lock:
            record = self._records[request_id]
            if record["status"] == "searching":
                record["status"] = "cancelled"

    # push channel
    def subscribe(self, request_id, on_update):
        with self._lock:
            self._listeners.setdefault(request_id, []).append(on_update)
        return InMemorySubscription(self, request_id, on_update)

    def remove_listener(self, request_id, on_update):
        with self._lock:
            listeners = self._listeners.get(request_id, [])
            if on_update in listeners:
                listeners.remove(on_update)

    # poll channel
    def poll(self, request_id):
        with self._lock:
            record = self._records[request_id]
            return StatusUpdate(record["status"], record["driver_id"])


class InMemoryDriverDirectory:
    """Stores loosely-typed driver rows, the way a users table would return them."""
    def __init__(self, drivers: Dict[str, Dict]):
        self.drivers = drivers

    def get_driver_snapshot(self, driver_id):
        return DriverSnapshot.from_payload(driver_id, self.drivers[driver_id])


def build_fare_tables() -> FareTables:
    fallback = default_fare_tables()
    slabs = tuple(OutstationSlab(coverage_km=km, fare=km * 13 + 500) for km in range(20, 301, 20))
    outstation = [
        OutstationRate(
            row.vehicle_class,
            base_fare=row.base_fare,
            per_km_rate=row.per_km_rate,
            driver_allowance_per_day=row.driver_allowance_per_day,
            slabs=slabs,
            extra_km_rate=row.per_km_rate + 1,
        )
        for row in fallback.outstation.values()
    ]
    rental = [
        RentalRate(VehicleClass.SEDAN, hours=4, included_km=40, base_fare=1200, extra_km_rate=14, extra_minute_rate=2),
        RentalRate(VehicleClass.SEDAN, hours=8, included_km=80, base_fare=2200, extra_km_rate=14, extra_minute_rate=2),
    ]
    return FareTables.build(
        standard=fallback.standard.values(),
        outstation=outstation,
        rental=rental,
        airport=fallback.airport.values(),
    )


def build_route_service() -> RouteService:
    if os.getenv("OSRM_BASE_URL"):
        return RouteService(OSRMClient())
    print("OSRM_BASE_URL not set, using straight-line distances.")
    return RouteService()


def run_quotes(quote_service: QuoteService, hub: Coordinate):
    print("\n--- Fare Quotes ---")
    trips = [
        ("City ride (between rings)", FareRequest(hub, Coordinate(12.80, 77.90), VehicleClass.SEDAN)),
        ("Outstation day trip", FareRequest(
            hub, Coordinate(12.9716, 77.5946), VehicleClass.SUV, ServiceType.OUTSTATION)),
        ("Outstation 3 days", FareRequest(
            hub, Coordinate(13.0827, 80.2707), VehicleClass.SEDAN_AC, ServiceType.OUTSTATION, days=3)),
        ("Rental 4h / 40km", FareRequest(
            hub, hub, VehicleClass.SEDAN, ServiceType.RENTAL, rental_package=RentalPackage(4, 40))),
        ("Airport drop", FareRequest(
            hub, Coordinate(13.1986, 77.7066), VehicleClass.HATCHBACK, ServiceType.AIRPORT,
            airport_direction=AirportDirection.HUB_TO_AIRPORT)),
    ]
    for label, request in trips:
        fare = quote_service.quote(request)
        print(
            f"{label:28s} {request.vehicle_class.value:13s} Rs {fare.total_fare:8.0f} "
            f"({fare.calculation_method.value}, {fare.distance_km:.1f} km, deadhead {fare.deadhead:.0f})"
        )

    batch = quote_service.quote_all(FareRequest(hub, Coordinate(12.78, 77.86), VehicleClass.HATCHBACK))
    print(f"All classes for a short ride: {len(batch.fares)} priced, {len(batch.failures)} without config")
    for vehicle_class, fare in batch.fares.items():
        print(f"  {vehicle_class.value:13s} Rs {fare.total_fare:.0f}")


def run_matching(service: MatchingService, backend: InMemoryBookingBackend, writer, searches=5):
    print("\n--- Driver Matching ---")
    assigned = 0
    for index in range(searches):
        kind = MatchKind.BOOKING if index % 2 else MatchKind.RIDE
        coordinator = service.request_driver(kind)
        outcome = coordinator.wait()
        attempts = 1

        if isinstance(outcome, TimedOut):
            print(f"[TIMEOUT] {coordinator.request_id} -> retrying once")
            backend.reopen(coordinator.request_id)
            coordinator = service.retry(coordinator)
            outcome = coordinator.wait()
            attempts += 1

        coordinator.join(1)
        if outcome.state is MatchState.ASSIGNED:
            assigned += 1
            snapshot = outcome.driver_snapshot
            print(
                f"[SUCCESS] {coordinator.request_id} -> {snapshot.name} "
                f"({snapshot.vehicle.display_name}, {snapshot.vehicle.registration}) via {outcome.source}"
            )
            writer.writerow([coordinator.request_id, kind.value, outcome.state.value, outcome.driver_id, outcome.source, attempts])
        else:
            print(f"[FAILED] {coordinator.request_id} -> {outcome.state.value}")
            writer.writerow([coordinator.request_id, kind.value, outcome.state.value, "", "", attempts])

    return assigned


def run_simulation():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    print("=== STARTING END-TO-END BOOKING SIMULATION ===")

    pricing_policy = default_pricing_policy()
    hub = pricing_policy.service_hub
    quote_service = QuoteService(
        FareCalculator(build_fare_tables(), pricing_policy),
        build_route_service(),
        InMemoryZoneRepository(hub),
    )
    run_quotes(quote_service, hub)

    # raw directory rows; the last one is missing most fields on purpose
    drivers = {
        f"driver_{i}": {
            "name": name,
            "phone": f"+91980000000{i}",
            "rating": round(random.uniform(4.2, 5.0), 1),
            "total_rides": random.randint(10, 900),
            "vehicle": {"make": "Maruti", "model": "Dzire", "registration": f"TN70AB{1000 + i}", "type": "sedan"},
        }
        for i, name in enumerate(["Arun", "Meena", "Karthik"])
    }
    drivers["driver_3"] = {"phone": "+919800000003"}
    backend = InMemoryBookingBackend(list(drivers))
    service = MatchingService(
        backend,
        notifier=backend,
        status_reader=backend,
        driver_directory=InMemoryDriverDirectory(drivers),
        policy=MatchingPolicy(search_timeout_seconds=4.0, poll_interval_seconds=0.5),
    )

    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    output_path = os.path.join(base_dir, "booking_results.csv")
    searches = 5
    with open(output_path, "w", newline="") as file:
        writer = csv.writer(file)
        writer.writerow(["request_id", "kind", "outcome", "driver_id", "channel", "attempts"])
        assigned = run_matching(service, backend, writer, searches)

    print("\n=== SIMULATION COMPLETE ===")
    print(f"Drivers Assigned: {assigned} / {searches}")
    print(f"Results written to '{os.path.basename(output_path)}'.")


if __name__ == "__main__":
    run_simulation()
