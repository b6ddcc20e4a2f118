from pydantic import Field

from bus_tracker.schemas.common import CamelModel
from bus_tracker.schemas.route import RouteRef


class StopCreate(CamelModel):
    name: str
    stop_code: str
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: str | None = None


class StopUpdate(CamelModel):
    name: str | None = None
    stop_code: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    address: str | None = None
    is_active: bool | None = None


class StopInfo(CamelModel):
    id: int
    name: str
    stop_code: str
    lat: float
    lng: float
    address: str | None = None
    qr_code: str | None = None
    is_active: bool = True
    routes: list[RouteRef] = []


class StopCreated(CamelModel):
    stop: StopInfo
    qr_url: str


class StopQr(CamelModel):
    qr_code: str
    qr_url: str
