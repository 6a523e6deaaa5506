"""Pydantic schemas for learning metrics."""

from typing import Literal

from pydantic import BaseModel, Field

MetricsWindow = Literal["day", "week", "month"]


class LearningMetrics(BaseModel):
    """Aggregate recommendation quality over a time window.

    Rates are fractions in [0, 1]. ai_accuracy is the satisfaction rate as a
    percentage; mean_accuracy_score averages the per-ride accuracy scores,
    which top out at 70.
    """

    window: MetricsWindow
    sample_size: int = 0
    ai_accuracy: float = 0.0
    mean_accuracy_score: float = 0.0
    satisfaction_rate: float = 0.0
    recommendation_usage_rate: float = 0.0
    average_selected_position: float = 0.0
    price_acceptance_rate: float = 0.0
    time_acceptance_rate: float = 0.0
    most_common_context_factors: list[str] = Field(default_factory=list)
    improvement_areas: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.sample_size == 0
