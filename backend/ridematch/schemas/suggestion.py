"""Pydantic schemas for pricing and ranked driver suggestions."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from ridematch.schemas.profile import PreferenceSummary
from ridematch.schemas.trip import Driver, TripRequest

WeatherCondition = Literal["sunny", "rain", "storm"]


class PricingContext(BaseModel):
    """Per-request multipliers shared by every candidate's price."""

    time_multiplier: float = 1.0
    demand_multiplier: float = 1.0
    weather: WeatherCondition = "sunny"
    weather_multiplier: float = 1.0
    context_factors: list[str] = Field(default_factory=list)


class PriceEstimate(BaseModel):
    """Dynamic price for one trip, in whole currency units."""

    base_price: int
    dynamic_price: int
    price_factors: list[str] = Field(default_factory=list)
    savings_percent: int | None = None


class DriverSuggestion(BaseModel):
    """One scored candidate. Recomputed on every request."""

    driver: Driver
    score: int = Field(..., ge=0, le=100)
    distance_km: float
    estimated_arrival_minutes: int
    estimated_price: int
    reasons: list[str] = Field(default_factory=list)
    price_factors: list[str] = Field(default_factory=list)
    savings_percent: int | None = None


class RankedSuggestions(BaseModel):
    """At least one driver matched; suggestions are sorted best first."""

    kind: Literal["ranked"] = "ranked"
    suggestions: list[DriverSuggestion]
    total_drivers: int
    eligible_drivers: int
    personalized: bool
    pricing_context: PricingContext
    preferences: PreferenceSummary | None = None


class NoDriversMatched(BaseModel):
    """Valid empty outcome: nobody in the pool passed the filter."""

    kind: Literal["no_drivers_matched"] = "no_drivers_matched"
    total_drivers: int
    personalized: bool
    preferences: PreferenceSummary | None = None

    @property
    def suggestions(self) -> list[DriverSuggestion]:
        return []


SuggestionResult = RankedSuggestions | NoDriversMatched


# --- HTTP payloads ---

class SuggestionRequest(BaseModel):
    trip: TripRequest
    drivers: list[Driver]


class ContextualInfo(BaseModel):
    total_available_drivers: int
    eligible_drivers: int
    passenger_count: int
    context_factors: list[str]
    user_preferences: PreferenceSummary | None = None


class SuggestionInsights(BaseModel):
    personalization_level: Literal["personalized", "standard"]
    time_multiplier: float
    demand_level: Literal["high", "normal"]
    weather: WeatherCondition


class SuggestionResponse(BaseModel):
    status: Literal["ok", "no_drivers_matched"]
    suggestions: list[DriverSuggestion]
    contextual_info: ContextualInfo
    insights: SuggestionInsights | None = None
