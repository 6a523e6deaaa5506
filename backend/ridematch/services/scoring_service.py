"""Scoring engine — 0-100 composite scores and rationale per candidate.

Two weighting schemes, selected by whether a preference profile is given:

    anonymous:     distance 0.40, rating 0.30, capacity 0.15, time 0.10,
                   neutral preference placeholder (70) 0.05
    personalized:  distance 0.35, rating compatibility 0.25,
                   car size compatibility 0.15, loyalty 0.15,
                   time pattern 0.10

Reasons are appended in a fixed order (distance, rating, size, loyalty,
time, savings); the presentation layer truncates the list, so the order is
part of the contract.
"""

import math

from ridematch.schemas.profile import UserPreferenceProfile
from ridematch.schemas.suggestion import DriverSuggestion, PricingContext
from ridematch.schemas.trip import Driver, TripRequest
from ridematch.services.geo import distance_km
from ridematch.services.pricing_service import PricingService, round_half_up
from ridematch.services.time_windows import is_late_night, is_rush_hour, time_bucket

ANONYMOUS_WEIGHTS = {
    "distance": 0.40,
    "rating": 0.30,
    "capacity": 0.15,
    "time": 0.10,
    "preference": 0.05,
}
PERSONALIZED_WEIGHTS = {
    "distance": 0.35,
    "rating": 0.25,
    "car_size": 0.15,
    "loyalty": 0.15,
    "time": 0.10,
}

# Stand-in for the preference term when there is no profile. Kept instead of
# renormalizing so anonymous and personalized score distributions line up.
NEUTRAL_PREFERENCE_SCORE = 70

PRICE_SENSITIVE_THRESHOLD = 0.7
PRICE_SENSITIVE_SAVINGS_BONUS = 10
MINUTES_PER_KM = 2


# --- Sub-scores (0-100) ---

def distance_score(km: float) -> float:
    return max(0.0, 100 - km * 10)


def rating_score(rating: float) -> float:
    return (rating / 5) * 100


def rating_compatibility(rating: float, preferred_range: tuple[float, float]) -> float:
    """Falling short of the range is penalized far more than exceeding it."""
    low, high = preferred_range
    if low <= rating <= high:
        return 100.0
    if rating < low:
        return max(0.0, 100 - (low - rating) * 40)
    return max(60.0, 100 - (rating - high) * 20)


def capacity_score(passengers: int, seats: int) -> float:
    if seats < passengers:
        return 0.0
    if seats == passengers:
        return 100.0
    if seats == passengers + 1:
        return 90.0
    return max(50.0, 100 - (seats - passengers) * 10)


def car_size_compatibility(seats: int, preferred_size: int) -> float:
    gap = abs(seats - preferred_size)
    if gap == 0:
        return 100.0
    if gap == 1:
        return 85.0
    if gap == 2:
        return 70.0
    return 50.0


def time_of_day_score(hour: int) -> float:
    """Rush hours score lower: supply is scarce, so any offered driver is good enough."""
    if is_rush_hour(hour):
        return 60.0
    if is_late_night(hour):
        return 80.0
    return 100.0


def estimated_arrival_minutes(km: float) -> int:
    """Flat 2 min/km heuristic, not a routed ETA."""
    return math.ceil(km * MINUTES_PER_KM)


def _finalize(raw_score: float) -> int:
    return max(0, min(100, round_half_up(raw_score)))


def _distance_reason(km: float, reasons: list[str]) -> None:
    if km < 2:
        reasons.append("Very close to your location")
    elif km < 5:
        reasons.append("Close to your location")


def _rating_reason(rating: float, reasons: list[str]) -> None:
    if rating >= 4.8:
        reasons.append(f"Excellent rating ({rating:.1f} stars)")
    elif rating >= 4.5:
        reasons.append(f"Great rating ({rating:.1f} stars)")


def _require_location(driver: Driver):
    if driver.location is None or driver.rating is None or driver.seat_capacity is None:
        raise ValueError(f"Driver {driver.id} reached scoring without location, rating or capacity")
    return driver.location


# --- Engine ---

class ScoringEngine:
    """Stateless scorer; safe to share across threads."""

    def __init__(self, pricing: PricingService):
        self.pricing = pricing

    def score(
        self,
        request: TripRequest,
        candidates: list[Driver],
        profile: UserPreferenceProfile | None = None,
        context: PricingContext | None = None,
    ) -> list[DriverSuggestion]:
        """Score every candidate. Output is unsorted, one entry per candidate."""
        if not candidates:
            return []
        if context is None:
            context = self.pricing.context_for(request)

        if profile is None:
            return [self._score_anonymous(request, driver, context) for driver in candidates]
        return [self._score_personalized(request, driver, profile, context) for driver in candidates]

    def _score_anonymous(
        self,
        request: TripRequest,
        driver: Driver,
        context: PricingContext,
    ) -> DriverSuggestion:
        location = _require_location(driver)
        reasons: list[str] = []
        km = distance_km(request.pickup, location)
        weights = ANONYMOUS_WEIGHTS

        score = distance_score(km) * weights["distance"]
        _distance_reason(km, reasons)

        score += rating_score(driver.rating) * weights["rating"]
        _rating_reason(driver.rating, reasons)

        score += capacity_score(request.passenger_count, driver.seat_capacity) * weights["capacity"]
        if driver.seat_capacity == request.passenger_count:
            reasons.append("Perfect car size for your group")
        elif driver.seat_capacity > request.passenger_count:
            reasons.append("Spacious vehicle")

        score += time_of_day_score(request.request_time.hour) * weights["time"]
        score += NEUTRAL_PREFERENCE_SCORE * weights["preference"]

        estimate = self.pricing.price(request, km, context)
        if estimate.savings_percent:
            reasons.append(f"{estimate.savings_percent}% savings")

        return self._suggestion(driver, score, km, estimate, reasons)

    def _score_personalized(
        self,
        request: TripRequest,
        driver: Driver,
        profile: UserPreferenceProfile,
        context: PricingContext,
    ) -> DriverSuggestion:
        location = _require_location(driver)
        reasons: list[str] = []
        km = distance_km(request.pickup, location)
        weights = PERSONALIZED_WEIGHTS

        score = distance_score(km) * weights["distance"]
        _distance_reason(km, reasons)

        score += rating_compatibility(driver.rating, profile.preferred_rating_range) * weights["rating"]
        _rating_reason(driver.rating, reasons)

        score += car_size_compatibility(driver.seat_capacity, profile.preferred_car_size) * weights["car_size"]
        if driver.seat_capacity == profile.preferred_car_size:
            reasons.append("Perfect car size match")

        loyalty = profile.driver_loyalty.get(driver.id, 0.0)
        score += loyalty * weights["loyalty"]
        if loyalty > 80:
            reasons.append("Your preferred driver!")
        elif loyalty > 50:
            reasons.append("You've ridden with this driver before")

        bucket = time_bucket(request.request_time.hour)
        affinity = profile.time_of_day_affinity.get(bucket, 0.5)
        score += affinity * 100 * weights["time"]
        if affinity > 0.7:
            reasons.append("Matches your usual ride time")

        estimate = self.pricing.price(request, km, context)
        if estimate.savings_percent:
            if profile.price_sensitivity > PRICE_SENSITIVE_THRESHOLD:
                score += PRICE_SENSITIVE_SAVINGS_BONUS
            reasons.append(f"{estimate.savings_percent}% savings")

        return self._suggestion(driver, score, km, estimate, reasons)

    @staticmethod
    def _suggestion(driver, raw_score, km, estimate, reasons) -> DriverSuggestion:
        return DriverSuggestion(
            driver=driver,
            score=_finalize(raw_score),
            distance_km=round_half_up(km * 10) / 10,
            estimated_arrival_minutes=estimated_arrival_minutes(km),
            estimated_price=estimate.dynamic_price,
            reasons=reasons,
            price_factors=estimate.price_factors,
            savings_percent=estimate.savings_percent,
        )


def rank_suggestions(suggestions: list[DriverSuggestion], limit: int) -> list[DriverSuggestion]:
    """Sort best first (stable for ties) and keep the top `limit`."""
    return sorted(suggestions, key=lambda s: s.score, reverse=True)[:limit]
