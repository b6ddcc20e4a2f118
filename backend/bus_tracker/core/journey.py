"""Passenger journey: walking time to the stop plus the bus ETA.

Stop mode (no passenger position): the bus ETA is measured to the stop.
Passenger mode: the bus ETA is measured to where the passenger stands, and
walking time from there to the stop is added on top.
"""

import math
from dataclasses import dataclass

from bus_tracker.core.eta_calculator import EtaEstimate
from bus_tracker.core.geo import Coordinate, haversine_km, round_km

WALKING_SPEED_KMH = 5.0


def _to_finite(value) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_passenger(lat, lng) -> Coordinate | None:
    """Build a passenger position from raw query values.

    Returns None unless both values are finite numbers; a malformed position
    falls back to stop mode instead of failing the query.
    """
    plat = _to_finite(lat)
    plng = _to_finite(lng)
    if plat is None or plng is None:
        return None
    return Coordinate(lat=plat, lng=plng)


@dataclass(frozen=True)
class Walk:
    distance_km: float
    minutes: int


@dataclass(frozen=True)
class Journey:
    eta_target: Coordinate
    walking_distance_km: float
    walking_minutes: int
    total_journey_minutes: int


class JourneyComposer:
    """Combines walking time with a bus ETA."""

    @staticmethod
    def eta_target(stop: Coordinate, passenger: Coordinate | None) -> Coordinate:
        return passenger if passenger is not None else stop

    @staticmethod
    def walking(passenger: Coordinate, stop: Coordinate) -> Walk:
        # Ceiling: never under-promise walking time
        distance = round_km(haversine_km(passenger, stop))
        minutes = math.ceil(distance * 60 / WALKING_SPEED_KMH)
        return Walk(distance_km=distance, minutes=minutes)

    def compose(
        self,
        passenger: Coordinate | None,
        stop: Coordinate,
        bus_eta: EtaEstimate,
    ) -> Journey:
        """Total time until the passenger meets the bus.

        ``bus_eta`` must already be measured to ``eta_target(stop, passenger)``.
        """
        if passenger is None:
            return Journey(
                eta_target=stop,
                walking_distance_km=0.0,
                walking_minutes=0,
                total_journey_minutes=bus_eta.eta_minutes,
            )

        walk = self.walking(passenger, stop)
        return Journey(
            eta_target=passenger,
            walking_distance_km=walk.distance_km,
            walking_minutes=walk.minutes,
            total_journey_minutes=bus_eta.eta_minutes + walk.minutes,
        )
