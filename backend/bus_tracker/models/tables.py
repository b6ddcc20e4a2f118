import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bus_tracker.models.base import Base


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Route(Base):
    __tablename__ = "routes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    stops: Mapped[list["RouteStop"]] = relationship(
        back_populates="route", order_by="RouteStop.order",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    buses: Mapped[list["Bus"]] = relationship(back_populates="route", passive_deletes=True)


class Stop(Base):
    __tablename__ = "stops"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    qr_code: Mapped[str | None] = mapped_column(Text, nullable=True)  # PNG data URL
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    route_stops: Mapped[list["RouteStop"]] = relationship(
        back_populates="stop", cascade="all, delete-orphan", passive_deletes=True
    )


class RouteStop(Base):
    __tablename__ = "route_stops"
    __table_args__ = (
        UniqueConstraint("route_id", "order", name="uq_route_stop_order"),
        UniqueConstraint("route_id", "stop_id", name="uq_route_stop_stop"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    route_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("routes.id", ondelete="CASCADE"), nullable=False
    )
    stop_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stops.id", ondelete="CASCADE"), nullable=False
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False)  # 0 = first stop
    distance_from_prev: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)  # km

    route: Mapped["Route"] = relationship(back_populates="stops")
    stop: Mapped["Stop"] = relationship(back_populates="route_stops")


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(10), nullable=False, default="driver")  # driver, admin
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    assigned_bus: Mapped["Bus | None"] = relationship(
        back_populates="driver", uselist=False, passive_deletes=True
    )


class Bus(Base):
    __tablename__ = "buses"
    __table_args__ = (
        Index("ix_buses_active_route", "is_active", "route_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    number: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    route_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("routes.id", ondelete="SET NULL"), nullable=True
    )
    driver_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True
    )
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=50)

    # Live tracking
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    speed: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)  # km/h
    heading: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)  # degrees 0-360
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    next_stop_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_updated: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    route: Mapped["Route | None"] = relationship(back_populates="buses")
    driver: Mapped["User | None"] = relationship(back_populates="assigned_bus")
