from pydantic import Field

from bus_tracker.schemas.common import CamelModel


class RouteRef(CamelModel):
    id: int
    name: str
    route_number: str


class RouteStopIn(CamelModel):
    stop_id: int
    order: int = Field(ge=0)
    distance_from_prev: float = Field(default=0.0, ge=0)  # km


class RouteCreate(CamelModel):
    name: str
    route_number: str
    description: str | None = None
    stops: list[RouteStopIn] = []


class RouteUpdate(CamelModel):
    name: str | None = None
    route_number: str | None = None
    description: str | None = None
    is_active: bool | None = None
    stops: list[RouteStopIn] | None = None  # replaces the whole stop list when given


class RouteStopInfo(CamelModel):
    stop_id: int
    order: int
    distance_from_prev: float
    name: str
    stop_code: str
    lat: float
    lng: float
    address: str | None = None


class RouteDetail(CamelModel):
    id: int
    name: str
    route_number: str
    description: str | None = None
    is_active: bool
    stops: list[RouteStopInfo] = []
