"""Pydantic schemas for trip requests and driver snapshots."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class GeoPoint(BaseModel):
    """A WGS84 coordinate in degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)


class Driver(BaseModel):
    """Snapshot of a driver as reported by the driver directory.

    Any of rating, seat_capacity and location may be missing; such drivers
    are excluded by the candidate filter instead of being defaulted.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    rating: float | None = Field(None, ge=0, le=5)
    seat_capacity: int | None = Field(None, ge=1)
    location: GeoPoint | None = None
    is_available: bool = False

    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    car_image_url: str | None = None


class TripRequest(BaseModel):
    """One rider's request for a driver."""

    model_config = ConfigDict(frozen=True)

    pickup: GeoPoint
    destination: GeoPoint | None = None
    passenger_count: int = Field(..., ge=1)
    requesting_user_id: str
    preferred_rating: float | None = Field(None, ge=0, le=5)
    request_time: datetime
