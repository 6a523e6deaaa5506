"""Preference profile adjustments — additive nudges with clamping.

Every learning signal is expressed as one call to `adjust_profile`. Values
are never overwritten outright: each adjustment moves the stored value a
bounded step toward (reinforce) or away from (penalize) an observation, or
adds a small delta (adjust, loyalty_update), then clamps into the field's
valid band.
"""

from datetime import datetime, timezone
from typing import Literal

from ridematch.schemas.profile import UserPreferenceProfile

AdjustmentMode = Literal["reinforce", "penalize", "adjust", "loyalty_update"]
PreferenceField = Literal[
    "preferred_rating",
    "preferred_car_size",
    "price_sensitivity",
    "average_ride_distance_km",
    "time_of_day_affinity",
    "driver_loyalty",
    "feedback_count",
]

RATING_LEARNING_RATE = 0.1
CAR_SIZE_LEARNING_RATE = 0.5
RIDE_DISTANCE_LEARNING_RATE = 0.2

RATING_BAND = (1.0, 5.0)
CAR_SIZE_BAND = (1, 8)
PRICE_SENSITIVITY_BAND = (0.0, 1.0)
RIDE_DISTANCE_BAND = (0.0, 200.0)
AFFINITY_BAND = (0.0, 1.0)
LOYALTY_BAND = (0.0, 100.0)
MAX_LOYALTY_DELTA = 10.0

# Which modes each field accepts
ALLOWED_MODES: dict[str, set[str]] = {
    "preferred_rating": {"reinforce", "penalize"},
    "preferred_car_size": {"reinforce", "penalize"},
    "price_sensitivity": {"adjust"},
    "average_ride_distance_km": {"reinforce", "adjust"},
    "time_of_day_affinity": {"adjust"},
    "driver_loyalty": {"loyalty_update"},
    "feedback_count": {"adjust"},
}
KEYED_FIELDS = {"time_of_day_affinity", "driver_loyalty"}


def clamp(value: float, band: tuple[float, float]) -> float:
    low, high = band
    return max(low, min(high, value))


def _nudge(current: float, observed: float, weight: float, rate: float, mode: str) -> float:
    """Step toward the observation (reinforce) or away from it (penalize)."""
    step = (observed - current) * abs(weight) * rate
    return current + step if mode == "reinforce" else current - step


def _shift_rating_range(
    preferred_range: tuple[float, float],
    observed: float,
    weight: float,
    mode: str,
) -> tuple[float, float]:
    low, high = preferred_range
    width = high - low
    midpoint = _nudge((low + high) / 2, observed, weight, RATING_LEARNING_RATE, mode)

    band_low, band_high = RATING_BAND
    midpoint = clamp(midpoint, (band_low + width / 2, band_high - width / 2))
    return (round(midpoint - width / 2, 4), round(midpoint + width / 2, 4))


def validate_adjustment(field: str, mode: str, key: str | None) -> None:
    if field not in ALLOWED_MODES:
        raise ValueError(f"Unknown preference field: {field}")
    if mode not in ALLOWED_MODES[field]:
        raise ValueError(f"Mode {mode!r} is not valid for {field}")
    if field in KEYED_FIELDS and not key:
        raise ValueError(f"{field} adjustments need a key")


def adjust_profile(
    profile: UserPreferenceProfile,
    field: PreferenceField,
    value: float,
    weight: float,
    mode: AdjustmentMode,
    key: str | None = None,
) -> UserPreferenceProfile:
    """Return a copy of `profile` with one adjustment applied."""
    validate_adjustment(field, mode, key)
    update: dict = {"last_updated_at": datetime.now(timezone.utc)}

    if field == "preferred_rating":
        update["preferred_rating_range"] = _shift_rating_range(
            profile.preferred_rating_range, value, weight, mode
        )

    elif field == "preferred_car_size":
        # Nudges accumulate in the float estimate; the seat count is its rounding
        current = profile.car_size_estimate
        if current is None:
            current = float(profile.preferred_car_size)
        size = clamp(_nudge(current, value, weight, CAR_SIZE_LEARNING_RATE, mode), CAR_SIZE_BAND)
        update["car_size_estimate"] = round(size, 4)
        update["preferred_car_size"] = int(size + 0.5)

    elif field == "price_sensitivity":
        update["price_sensitivity"] = round(
            clamp(profile.price_sensitivity + value * weight, PRICE_SENSITIVITY_BAND), 4
        )

    elif field == "average_ride_distance_km":
        if mode == "reinforce":
            distance = _nudge(profile.average_ride_distance_km, value, weight, RIDE_DISTANCE_LEARNING_RATE, mode)
        else:
            distance = profile.average_ride_distance_km + value * weight
        update["average_ride_distance_km"] = round(clamp(distance, RIDE_DISTANCE_BAND), 4)

    elif field == "time_of_day_affinity":
        affinities = dict(profile.time_of_day_affinity)
        current = affinities.get(key, 0.5)
        affinities[key] = round(clamp(current + value * weight, AFFINITY_BAND), 4)
        update["time_of_day_affinity"] = affinities

    elif field == "driver_loyalty":
        loyalty = dict(profile.driver_loyalty)
        delta = clamp(value * weight, (-MAX_LOYALTY_DELTA, MAX_LOYALTY_DELTA))
        loyalty[key] = round(clamp(loyalty.get(key, 0.0) + delta, LOYALTY_BAND), 4)
        update["driver_loyalty"] = loyalty

    elif field == "feedback_count":
        update["feedback_count"] = max(0, profile.feedback_count + int(value))

    return profile.model_copy(update=update)
