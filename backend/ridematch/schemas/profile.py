"""Pydantic schemas for learned user preference profiles."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

TimeBucket = Literal["morning", "afternoon", "evening", "night"]

DEFAULT_RATING_RANGE = (4.5, 5.0)
DEFAULT_CAR_SIZE = 4
DEFAULT_AVERAGE_RIDE_DISTANCE_KM = 8.5
DEFAULT_TIME_OF_DAY_AFFINITY = {
    "morning": 0.7,
    "afternoon": 0.5,
    "evening": 0.8,
    "night": 0.3,
}
DEFAULT_PRICE_SENSITIVITY = 0.6


class UserPreferenceProfile(BaseModel):
    """Learned preferences for one user.

    price_sensitivity: 0 = price insensitive, 1 = very price sensitive.
    driver_loyalty maps driver id -> affinity in [0, 100].
    car_size_estimate carries fractional car-size learning; preferred_car_size
    is its rounded value.
    """

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    preferred_rating_range: tuple[float, float] = DEFAULT_RATING_RANGE
    preferred_car_size: int = DEFAULT_CAR_SIZE
    car_size_estimate: float | None = None
    average_ride_distance_km: float = DEFAULT_AVERAGE_RIDE_DISTANCE_KM
    time_of_day_affinity: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_TIME_OF_DAY_AFFINITY))
    driver_loyalty: dict[str, float] = Field(default_factory=dict)
    price_sensitivity: float = DEFAULT_PRICE_SENSITIVITY
    feedback_count: int = 0
    last_updated_at: datetime | None = None

    @model_validator(mode="after")
    def _check_rating_range(self) -> "UserPreferenceProfile":
        low, high = self.preferred_rating_range
        if low > high:
            raise ValueError("preferred_rating_range min must not exceed max")
        return self

    @classmethod
    def defaults(cls, user_id: str) -> "UserPreferenceProfile":
        return cls(user_id=user_id)


class PreferenceSummary(BaseModel):
    """Subset of the profile echoed back with suggestions."""

    preferred_rating_range: tuple[float, float]
    preferred_car_size: int
    price_sensitivity: float
