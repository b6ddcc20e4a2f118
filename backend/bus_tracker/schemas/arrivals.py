import datetime

from bus_tracker.schemas.common import CamelModel, LatLng


class PolylinePointInfo(CamelModel):
    name: str
    stop_code: str
    order: int
    lat: float
    lng: float
    is_scanned_stop: bool
    is_passed: bool


class BusArrivalInfo(CamelModel):
    id: int
    bus_number: str
    bus_name: str
    route_name: str
    route_number: str
    driver_name: str
    current_location: LatLng
    speed: float
    distance_km: float
    distance_to_stop: float
    eta_minutes: int
    total_journey_minutes: int
    last_updated: datetime.datetime | None = None
    stops_away: int
    route_polyline: list[PolylinePointInfo] = []


class StopSummaryInfo(CamelModel):
    id: int
    name: str
    code: str
    address: str
    lat: float
    lng: float


class PassengerSummaryInfo(CamelModel):
    lat: float
    lng: float
    walking_distance_km: float
    walking_minutes: int


class StopArrivals(CamelModel):
    stop: StopSummaryInfo
    passenger: PassengerSummaryInfo | None = None
    buses: list[BusArrivalInfo]
