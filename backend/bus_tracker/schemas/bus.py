import datetime

from pydantic import Field

from bus_tracker.schemas.common import CamelModel, LatLng
from bus_tracker.schemas.route import RouteRef


class DriverRef(CamelModel):
    id: int
    name: str
    phone: str | None = None


class BusCreate(CamelModel):
    bus_number: str
    bus_name: str | None = None
    route_id: int | None = None
    capacity: int = Field(default=50, ge=1)


class BusUpdate(CamelModel):
    bus_number: str | None = None
    bus_name: str | None = None
    route_id: int | None = None
    capacity: int | None = Field(default=None, ge=1)
    next_stop_index: int | None = Field(default=None, ge=0)


class BusInfo(CamelModel):
    id: int
    bus_number: str
    bus_name: str | None = None
    route: RouteRef | None = None
    driver: DriverRef | None = None
    capacity: int
    current_location: LatLng | None = None
    speed: float
    heading: float
    is_active: bool
    next_stop_index: int
    last_updated: datetime.datetime | None = None


class LocationUpdate(CamelModel):
    bus_id: int
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    speed: float | None = Field(default=None, ge=0)  # km/h
    heading: float | None = None
    next_stop_index: int | None = Field(default=None, ge=0)


class LocationAck(CamelModel):
    message: str
    last_updated: datetime.datetime


class EndShift(CamelModel):
    bus_id: int


class AssignBus(CamelModel):
    driver_id: int
    bus_id: int | None = None  # None unassigns
