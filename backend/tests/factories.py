"""Builders for drivers, trip requests and feedback used across the test suite."""

import math
from datetime import datetime, timezone

from ridematch.schemas.feedback import RideFeedback
from ridematch.schemas.trip import Driver, GeoPoint, TripRequest
from ridematch.services.geo import EARTH_RADIUS_KM

PICKUP = GeoPoint(latitude=10.7769, longitude=106.7009)

# 2026-10-14 is a Wednesday, 2026-10-17 a Saturday
WEEKDAY_RUSH = datetime(2026, 10, 14, 8, 0)
WEEKDAY_NOON = datetime(2026, 10, 14, 12, 0)
WEEKDAY_EVENING = datetime(2026, 10, 14, 20, 0)
SATURDAY_AFTERNOON = datetime(2026, 10, 17, 14, 0)
SATURDAY_LATE = datetime(2026, 10, 17, 23, 0)


def point_at_km(km: float, origin: GeoPoint = PICKUP) -> GeoPoint:
    """A point `km` due north of origin (exact along a meridian)."""
    return GeoPoint(
        latitude=origin.latitude + math.degrees(km / EARTH_RADIUS_KM),
        longitude=origin.longitude,
    )


def make_driver(
    driver_id: str = "driver-1",
    km: float | None = 3.0,
    rating: float | None = 4.9,
    seats: int | None = 4,
    available: bool = True,
) -> Driver:
    return Driver(
        id=driver_id,
        rating=rating,
        seat_capacity=seats,
        location=point_at_km(km) if km is not None else None,
        is_available=available,
    )


def make_request(
    passengers: int = 4,
    at: datetime = WEEKDAY_RUSH,
    user_id: str = "rider-1",
    preferred_rating: float | None = None,
) -> TripRequest:
    return TripRequest(
        pickup=PICKUP,
        passenger_count=passengers,
        requesting_user_id=user_id,
        preferred_rating=preferred_rating,
        request_time=at,
    )


def make_feedback(ride_id: str = "ride-1", **overrides) -> RideFeedback:
    fields = {
        "ride_id": ride_id,
        "user_id": "rider-1",
        "driver_id": "driver-1",
        "user_rating": 5,
        "ai_score": 90,
        "was_recommended": True,
        "selected_position": 1,
        "satisfaction": "very_satisfied",
        "price_acceptance": "fair",
        "time_acceptance": "acceptable",
        "context_factors": ["Rush hour - high demand"],
        "created_at": datetime(2026, 10, 14, 9, 0, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return RideFeedback(**fields)
