"""Calculate bus ETA from great-circle distance and reported speed."""

import logging
import math
from dataclasses import dataclass

from bus_tracker.core.geo import Coordinate, haversine_km, round_km

logger = logging.getLogger(__name__)

# Reported speeds at or below this (km/h) are treated as stalled
STALLED_SPEED_KMH = 5.0
# Assumed cruising speed for stalled / idling buses (km/h)
FALLBACK_SPEED_KMH = 20.0


@dataclass(frozen=True)
class EtaEstimate:
    distance_km: float  # rounded to 2 decimals
    eta_minutes: int


def effective_speed(speed_kmh: float | None) -> float:
    """Reported speed if the bus is moving, otherwise the fallback speed."""
    if speed_kmh is not None and speed_kmh > STALLED_SPEED_KMH:
        return speed_kmh
    return FALLBACK_SPEED_KMH


def round_minutes(minutes: float) -> int:
    """Round half-up, so 2.5 minutes is 3 (not banker's rounding)."""
    return int(math.floor(minutes + 0.5))


class EtaCalculator:
    """Straight-line ETA with a stalled-bus speed floor."""

    def estimate(
        self,
        bus_pos: Coordinate,
        target_pos: Coordinate,
        speed_kmh: float | None,
    ) -> EtaEstimate:
        """Distance (km) and ETA (minutes) from the bus to a target point.

        The ETA uses the unrounded distance; only the reported distance is
        rounded for display.
        """
        distance = haversine_km(bus_pos, target_pos)
        speed = effective_speed(speed_kmh)
        eta = round_minutes(distance / speed * 60)
        return EtaEstimate(distance_km=round_km(distance), eta_minutes=eta)
