"""Stop arrivals: which buses are approaching a stop, and when.

Runs each candidate bus through the route-progress gate, the ETA estimator
and the journey composer, then ranks the survivors by ETA.
"""

import datetime
import logging
from dataclasses import dataclass

from bus_tracker.core.eta_calculator import EtaCalculator
from bus_tracker.core.geo import Coordinate
from bus_tracker.core.journey import JourneyComposer
from bus_tracker.core.route_progress import PolylinePoint, RouteProgressFilter
from bus_tracker.core.snapshots import BusSnapshot, StopSnapshot

logger = logging.getLogger(__name__)

UNKNOWN_DRIVER = "Unknown"


class StopNotFoundError(LookupError):
    """The requested stop does not exist; the whole query is aborted."""

    def __init__(self, stop_id) -> None:
        super().__init__(f"Stop {stop_id} not found")
        self.stop_id = stop_id


@dataclass(frozen=True)
class StopSummary:
    id: int
    name: str
    code: str
    address: str
    lat: float
    lng: float


@dataclass(frozen=True)
class PassengerSummary:
    lat: float
    lng: float
    walking_distance_km: float
    walking_minutes: int


@dataclass(frozen=True)
class BusArrival:
    id: int
    bus_number: str
    bus_name: str
    route_name: str
    route_number: str
    driver_name: str
    current_location: Coordinate
    speed: float
    distance_km: float  # bus -> ETA target (passenger or stop)
    distance_to_stop: float  # bus -> stop, always
    eta_minutes: int
    total_journey_minutes: int
    last_updated: datetime.datetime | None
    stops_away: int
    route_polyline: tuple[PolylinePoint, ...]


@dataclass(frozen=True)
class ArrivalsResult:
    stop: StopSummary
    passenger: PassengerSummary | None
    buses: list[BusArrival]


class StopArrivalOrchestrator:
    """Computes the ranked list of buses approaching a stop."""

    def __init__(self) -> None:
        self.progress_filter = RouteProgressFilter()
        self.eta_calculator = EtaCalculator()
        self.journey_composer = JourneyComposer()

    def compute_arrivals(
        self,
        stop: StopSnapshot,
        buses: list[BusSnapshot],
        passenger: Coordinate | None = None,
    ) -> ArrivalsResult:
        """Evaluate every candidate bus against the stop and rank the results.

        Buses are expected to be active and on a route serving the stop.
        Buses with incomplete data, or for which the stop is already behind
        them, are skipped without failing the query.

        Ranking is by ``eta_minutes`` to the ETA target (not total journey
        time); equal ETAs keep their input order.
        """
        ranked: list[tuple[int, int, BusArrival]] = []
        for position, bus in enumerate(buses):
            arrival = self._evaluate_bus(stop, bus, passenger)
            if arrival is not None:
                ranked.append((arrival.eta_minutes, position, arrival))

        ranked.sort(key=lambda item: (item[0], item[1]))

        passenger_summary = None
        if passenger is not None:
            walk = self.journey_composer.walking(passenger, stop.coordinate)
            passenger_summary = PassengerSummary(
                lat=passenger.lat,
                lng=passenger.lng,
                walking_distance_km=walk.distance_km,
                walking_minutes=walk.minutes,
            )

        logger.debug(
            "Stop %s: %d of %d candidate buses approaching",
            stop.id, len(ranked), len(buses),
        )
        return ArrivalsResult(
            stop=StopSummary(
                id=stop.id,
                name=stop.name,
                code=stop.code,
                address=stop.address,
                lat=stop.coordinate.lat,
                lng=stop.coordinate.lng,
            ),
            passenger=passenger_summary,
            buses=[arrival for _, _, arrival in ranked],
        )

    def _evaluate_bus(
        self,
        stop: StopSnapshot,
        bus: BusSnapshot,
        passenger: Coordinate | None,
    ) -> BusArrival | None:
        if not bus.is_active:
            return None
        route = bus.route
        if route is None or bus.location is None:
            logger.debug("Bus %s skipped: no route or location", bus.id)
            return None

        progress = self.progress_filter.evaluate(route, stop.id, bus)
        if not progress.included:
            return None

        target = self.journey_composer.eta_target(stop.coordinate, passenger)
        primary = self.eta_calculator.estimate(bus.location, target, bus.speed)
        to_stop = self.eta_calculator.estimate(bus.location, stop.coordinate, bus.speed)
        journey = self.journey_composer.compose(passenger, stop.coordinate, primary)

        return BusArrival(
            id=bus.id,
            bus_number=bus.bus_number,
            bus_name=bus.bus_name,
            route_name=route.name,
            route_number=route.number,
            driver_name=bus.driver_name or UNKNOWN_DRIVER,
            current_location=bus.location,
            speed=bus.speed,
            distance_km=primary.distance_km,
            distance_to_stop=to_stop.distance_km,
            eta_minutes=primary.eta_minutes,
            total_journey_minutes=journey.total_journey_minutes,
            last_updated=bus.last_updated,
            stops_away=progress.stops_away,
            route_polyline=progress.polyline,
        )


def compute_arrivals(
    stop: StopSnapshot,
    buses: list[BusSnapshot],
    passenger: Coordinate | None = None,
) -> ArrivalsResult:
    """Module-level shortcut for a one-off orchestrator run."""
    return StopArrivalOrchestrator().compute_arrivals(stop, buses, passenger)
