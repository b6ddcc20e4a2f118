from bus_tracker.schemas.bus import BusInfo
from bus_tracker.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    name: str
    phone: str
    password: str


class LoginRequest(CamelModel):
    phone: str
    password: str


class UserInfo(CamelModel):
    id: int
    name: str
    phone: str
    role: str


class DriverInfo(UserInfo):
    assigned_bus: BusInfo | None = None


class AuthResponse(CamelModel):
    token: str
    user: DriverInfo
    message: str | None = None


class UserCreated(CamelModel):
    message: str
    user: UserInfo


class AssignmentResult(CamelModel):
    message: str
    driver: DriverInfo
