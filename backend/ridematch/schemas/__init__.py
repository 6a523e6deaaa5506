"""Pydantic schemas package."""

from ridematch.schemas.trip import (
    Driver,
    GeoPoint,
    TripRequest,
)
from ridematch.schemas.profile import (
    PreferenceSummary,
    TimeBucket,
    UserPreferenceProfile,
)
from ridematch.schemas.suggestion import (
    ContextualInfo,
    DriverSuggestion,
    NoDriversMatched,
    PriceEstimate,
    PricingContext,
    RankedSuggestions,
    SuggestionInsights,
    SuggestionRequest,
    SuggestionResponse,
    SuggestionResult,
    WeatherCondition,
)
from ridematch.schemas.feedback import (
    FeedbackOutcome,
    GlobalFeatureWeight,
    PriceAcceptance,
    RideFeedback,
    Satisfaction,
    TimeAcceptance,
)
from ridematch.schemas.metrics import (
    LearningMetrics,
    MetricsWindow,
)

__all__ = [
    # Trip
    "Driver",
    "GeoPoint",
    "TripRequest",
    # Profile
    "PreferenceSummary",
    "TimeBucket",
    "UserPreferenceProfile",
    # Suggestion
    "ContextualInfo",
    "DriverSuggestion",
    "NoDriversMatched",
    "PriceEstimate",
    "PricingContext",
    "RankedSuggestions",
    "SuggestionInsights",
    "SuggestionRequest",
    "SuggestionResponse",
    "SuggestionResult",
    "WeatherCondition",
    # Feedback
    "FeedbackOutcome",
    "GlobalFeatureWeight",
    "PriceAcceptance",
    "RideFeedback",
    "Satisfaction",
    "TimeAcceptance",
    # Metrics
    "LearningMetrics",
    "MetricsWindow",
]
