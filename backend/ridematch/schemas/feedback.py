"""Pydantic schemas for ride feedback and global feature weights."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Satisfaction = Literal["very_satisfied", "satisfied", "neutral", "dissatisfied", "very_dissatisfied"]
PriceAcceptance = Literal["too_expensive", "fair", "good_value"]
TimeAcceptance = Literal["too_long", "acceptable", "very_fast"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RideFeedback(BaseModel):
    """Immutable record of one completed ride, as rated by the rider."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    ride_id: str = Field(..., min_length=1, max_length=64)
    user_id: str = Field(..., min_length=1, max_length=64)
    driver_id: str = Field(..., min_length=1, max_length=64)
    user_rating: int = Field(..., ge=1, le=5)
    ai_score: int = Field(..., ge=0, le=100)
    was_recommended: bool
    selected_position: int = Field(..., ge=1)
    satisfaction: Satisfaction
    price_acceptance: PriceAcceptance
    time_acceptance: TimeAcceptance
    context_factors: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)

    feedback_text: str | None = None
    # Snapshot of the driver as shown when the ride was booked
    driver_rating: float | None = Field(None, ge=0, le=5)
    driver_seat_capacity: int | None = Field(None, ge=1)
    ride_distance_km: float | None = Field(None, ge=0, allow_inf_nan=False)
    ride_requested_at: datetime | None = None

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class FeedbackOutcome(BaseModel):
    """What happened to a submitted feedback record."""

    ride_id: str
    status: Literal["recorded", "duplicate"]
    accuracy_score: float | None = None
    failed_steps: list[str] = Field(default_factory=list)


class GlobalFeatureWeight(BaseModel):
    """Running means for one scoring feature across all feedback."""

    model_config = ConfigDict(from_attributes=True)

    feature_name: str
    weight_adjustment: float = 0.0
    accuracy_score: float = 0.0
    sample_count: int = 0
