"""Learning metrics — rolling recommendation quality over a time window."""

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Callable

from ridematch.repositories.base import LearningRepository
from ridematch.schemas.feedback import RideFeedback
from ridematch.schemas.metrics import LearningMetrics, MetricsWindow
from ridematch.services.learning_service import accuracy_score

logger = logging.getLogger(__name__)

WINDOW_DAYS = {"day": 1, "week": 7, "month": 30}
TOP_CONTEXT_FACTORS = 5

SATISFIED = {"satisfied", "very_satisfied"}
PRICE_ACCEPTED = {"fair", "good_value"}
TIME_ACCEPTED = {"acceptable", "very_fast"}


def _rate(feedback: list[RideFeedback], predicate: Callable[[RideFeedback], bool]) -> float:
    return sum(1 for f in feedback if predicate(f)) / len(feedback)


def improvement_areas(metrics: LearningMetrics) -> list[str]:
    if metrics.is_empty:
        return []
    areas = []
    if metrics.satisfaction_rate < 0.8:
        areas.append("User satisfaction needs improvement")
    if metrics.average_selected_position > 2:
        areas.append("Top recommendations not being selected")
    if metrics.price_acceptance_rate < 0.7:
        areas.append("Price predictions need adjustment")
    if metrics.time_acceptance_rate < 0.8:
        areas.append("Time estimates need refinement")
    return areas


class MetricsService:
    def __init__(self, repository: LearningRepository, clock: Callable[[], datetime] | None = None):
        self.repository = repository
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def metrics(self, window: MetricsWindow = "week") -> LearningMetrics:
        """Aggregate feedback created in the last day, week or month.

        An empty window is a valid outcome: the result has sample_size 0,
        zeroed rates and no improvement areas.
        """
        if window not in WINDOW_DAYS:
            raise ValueError(f"Unknown metrics window: {window}")

        now = self._clock()
        feedback = self.repository.list_feedback(since=now - timedelta(days=WINDOW_DAYS[window]), until=now)
        if not feedback:
            logger.info("No feedback in the last %s", window)
            return LearningMetrics(window=window)

        factor_counts = Counter(factor for f in feedback for factor in f.context_factors)

        satisfaction_rate = _rate(feedback, lambda f: f.satisfaction in SATISFIED)

        metrics = LearningMetrics(
            window=window,
            sample_size=len(feedback),
            ai_accuracy=round(satisfaction_rate * 100, 2),
            mean_accuracy_score=round(sum(accuracy_score(f) for f in feedback) / len(feedback), 2),
            satisfaction_rate=satisfaction_rate,
            recommendation_usage_rate=_rate(feedback, lambda f: f.was_recommended),
            average_selected_position=sum(f.selected_position for f in feedback) / len(feedback),
            price_acceptance_rate=_rate(feedback, lambda f: f.price_acceptance in PRICE_ACCEPTED),
            time_acceptance_rate=_rate(feedback, lambda f: f.time_acceptance in TIME_ACCEPTED),
            most_common_context_factors=[factor for factor, _ in factor_counts.most_common(TOP_CONTEXT_FACTORS)],
        )
        return metrics.model_copy(update={"improvement_areas": improvement_areas(metrics)})

    def improvement_suggestions(self, window: MetricsWindow = "week") -> list[str]:
        metrics = self.metrics(window)
        if metrics.is_empty:
            return []

        suggestions = []
        if metrics.ai_accuracy < 75:
            suggestions.append("Consider adjusting weight distribution in recommendation algorithm")
        if metrics.average_selected_position > 2.5:
            suggestions.append("Improve ranking algorithm to surface better top choices")
        if metrics.price_acceptance_rate < 0.7:
            suggestions.append("Refine dynamic pricing model based on user feedback")
        if metrics.satisfaction_rate < 0.8:
            suggestions.append("Enhance personalization features and user preference learning")
        return suggestions
