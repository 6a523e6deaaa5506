"""Recommendation service — filter, score and rank drivers for one trip request."""

import logging
import math

from ridematch.config import get_settings
from ridematch.errors import EngineUnavailableError, InvalidTripRequestError, PersistenceError
from ridematch.repositories.base import LearningRepository
from ridematch.schemas.profile import PreferenceSummary, UserPreferenceProfile
from ridematch.schemas.suggestion import NoDriversMatched, RankedSuggestions, SuggestionResult
from ridematch.schemas.trip import Driver, GeoPoint, TripRequest
from ridematch.services.candidate_filter import filter_candidates
from ridematch.services.pricing_service import PricingService
from ridematch.services.scoring_service import ScoringEngine, rank_suggestions

logger = logging.getLogger(__name__)


def _check_point(name: str, point: GeoPoint | None) -> None:
    if point is None:
        return
    if not (math.isfinite(point.latitude) and math.isfinite(point.longitude)):
        raise InvalidTripRequestError(f"{name} coordinates must be finite")
    if not (-90 <= point.latitude <= 90 and -180 <= point.longitude <= 180):
        raise InvalidTripRequestError(f"{name} coordinates out of range")


def ensure_valid_request(request: TripRequest) -> None:
    """Reject requests that cannot be scored. Never coerces."""
    if request.pickup is None:
        raise InvalidTripRequestError("pickup location is required")
    _check_point("pickup", request.pickup)
    _check_point("destination", request.destination)
    if request.passenger_count is None or request.passenger_count < 1:
        raise InvalidTripRequestError("passenger_count must be at least 1")


def _summary(profile: UserPreferenceProfile | None) -> PreferenceSummary | None:
    if profile is None:
        return None
    return PreferenceSummary(
        preferred_rating_range=profile.preferred_rating_range,
        preferred_car_size=profile.preferred_car_size,
        price_sensitivity=profile.price_sensitivity,
    )


class RecommendationService:
    def __init__(
        self,
        repository: LearningRepository,
        pricing: PricingService | None = None,
        max_suggestions: int | None = None,
        cold_start_threshold: int | None = None,
    ):
        settings = get_settings()
        self.repository = repository
        self.pricing = pricing or PricingService()
        self.scoring = ScoringEngine(self.pricing)
        self.max_suggestions = max_suggestions if max_suggestions is not None else settings.max_suggestions
        self.cold_start_threshold = (
            cold_start_threshold if cold_start_threshold is not None else settings.cold_start_threshold
        )

    def load_profile(self, user_id: str) -> UserPreferenceProfile | None:
        """The user's profile once it has enough feedback to personalize, else None."""
        try:
            profile = self.repository.get_profile(user_id)
        except PersistenceError as e:
            raise EngineUnavailableError(f"preference store unavailable: {e}") from e

        if profile.feedback_count < self.cold_start_threshold:
            logger.debug(
                "User %s has %d feedback records (< %d), using anonymous scoring",
                user_id,
                profile.feedback_count,
                self.cold_start_threshold,
            )
            return None
        return profile

    def suggest(self, request: TripRequest, drivers: list[Driver], personalized: bool = True) -> SuggestionResult:
        """Top suggestions for the request, or NoDriversMatched.

        Raises InvalidTripRequestError for unscoreable requests and
        EngineUnavailableError when the profile store cannot be read.
        """
        ensure_valid_request(request)

        profile = self.load_profile(request.requesting_user_id) if personalized else None
        summary = _summary(profile)
        candidates = filter_candidates(request, drivers, profile)

        if not candidates:
            logger.info(
                "No drivers matched for user %s (%d in pool)", request.requesting_user_id, len(drivers)
            )
            return NoDriversMatched(
                total_drivers=len(drivers), personalized=profile is not None, preferences=summary
            )

        context = self.pricing.context_for(request)
        scored = self.scoring.score(request, candidates, profile, context)
        ranked = rank_suggestions(scored, self.max_suggestions)

        logger.info(
            "Ranked %d of %d eligible drivers for user %s (%s)",
            len(ranked),
            len(candidates),
            request.requesting_user_id,
            "personalized" if profile is not None else "anonymous",
        )
        return RankedSuggestions(
            suggestions=ranked,
            total_drivers=len(drivers),
            eligible_drivers=len(candidates),
            personalized=profile is not None,
            pricing_context=context,
            preferences=summary,
        )
