"""Candidate filter — narrows the driver pool to drivers eligible for a trip.

Hard constraints always apply. Personalized constraints apply only when a
preference profile is supplied. Filtering never raises; an empty list is a
normal outcome.
"""

import logging

from ridematch.schemas.profile import UserPreferenceProfile
from ridematch.schemas.trip import Driver, TripRequest
from ridematch.services.geo import distance_km

logger = logging.getLogger(__name__)

# Floor for the personalized distance cap so new users are not over-filtered
MIN_PERSONALIZED_RADIUS_KM = 10.0
PERSONALIZED_RADIUS_FACTOR = 1.5


def personalized_radius_km(profile: UserPreferenceProfile) -> float | None:
    """Max pickup distance for this user, or None when there is no history."""
    if profile.average_ride_distance_km <= 0:
        return None
    return max(MIN_PERSONALIZED_RADIUS_KM, profile.average_ride_distance_km * PERSONALIZED_RADIUS_FACTOR)


def exclusion_reason(
    request: TripRequest,
    driver: Driver,
    profile: UserPreferenceProfile | None = None,
) -> str | None:
    """Return the first constraint this driver violates, or None if eligible."""
    if not driver.is_available:
        return "unavailable"
    if driver.seat_capacity is None or driver.seat_capacity < request.passenger_count:
        return "insufficient_capacity"
    if driver.location is None:
        return "no_location"
    if driver.rating is None:
        return "no_rating"
    if request.preferred_rating is not None and driver.rating < request.preferred_rating:
        return "below_requested_rating"

    if profile is None:
        return None

    if driver.rating < profile.preferred_rating_range[0]:
        return "below_preferred_rating"

    radius = personalized_radius_km(profile)
    if radius is not None and distance_km(request.pickup, driver.location) > radius:
        return "outside_personal_radius"

    return None


def filter_candidates(
    request: TripRequest,
    drivers: list[Driver],
    profile: UserPreferenceProfile | None = None,
) -> list[Driver]:
    """Return the eligible drivers, preserving input order."""
    candidates = []
    for driver in drivers:
        reason = exclusion_reason(request, driver, profile)
        if reason:
            logger.debug("Excluded driver %s: %s", driver.id, reason)
            continue
        candidates.append(driver)
    return candidates
