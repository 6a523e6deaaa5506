"""Feedback ingestion and the online learning loop.

Recording a ride runs these steps:

    1. persist the raw feedback (idempotent per ride_id)   -- must succeed
    2. derive a satisfaction weight
    3. reinforce / penalize rating and car size preferences
    4. nudge price sensitivity, driver loyalty and ride history
    5. compute the event's accuracy score
    6. fold the accuracy into each global feature weight

Step 1 is retried with backoff and rejects the whole event if it keeps
failing. Later steps are independent: a failure is logged and reported but
never undoes the stored feedback.
"""

import logging
import random
import time
from typing import Callable, TypeVar

from ridematch.config import get_settings
from ridematch.errors import FeedbackRejectedError, PersistenceError
from ridematch.repositories.base import LearningRepository
from ridematch.schemas.feedback import FeedbackOutcome, RideFeedback
from ridematch.services.driver_directory import DriverDirectory
from ridematch.services.time_windows import time_bucket

logger = logging.getLogger(__name__)

T = TypeVar("T")

FEATURE_NAMES = ("distance", "rating", "car_size", "loyalty", "time")

SATISFACTION_WEIGHTS = {
    "very_satisfied": 1.0,
    "satisfied": 0.7,
    "neutral": 0.0,
    "dissatisfied": -0.5,
    "very_dissatisfied": -1.0,
}

# Satisfaction on the 0-100 accuracy scale
SATISFACTION_SCORES = {
    "very_satisfied": 100,
    "satisfied": 80,
    "neutral": 50,
    "dissatisfied": 20,
    "very_dissatisfied": 0,
}

PRICE_SENSITIVITY_DELTAS = {
    "too_expensive": 0.1,
    "fair": 0.0,
    "good_value": -0.05,
}

LOYALTY_SCALE = 10
TIME_AFFINITY_STEP = 0.05
WEIGHT_ADJUSTMENT_SCALE = 1000


def satisfaction_weight(feedback: RideFeedback) -> float:
    return SATISFACTION_WEIGHTS[feedback.satisfaction]


def accuracy_score(feedback: RideFeedback) -> float:
    """How well the recommendation matched the rider's experience (0-100).

    Starts at 50, moves with satisfaction, and is penalized when the rider
    picked a lower-ranked suggestion or rated the ride far from the score
    the engine predicted.
    """
    score = 50.0
    score += (SATISFACTION_SCORES[feedback.satisfaction] - 50) * 0.4
    score -= max(0, (feedback.selected_position - 1) * 10) * 0.3
    score -= abs(feedback.ai_score - feedback.user_rating * 20) * 0.3
    return max(0.0, min(100.0, score))


class LearningService:
    def __init__(
        self,
        repository: LearningRepository,
        driver_directory: DriverDirectory | None = None,
        retry_attempts: int | None = None,
        retry_base_delay: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        settings = get_settings()
        self.repository = repository
        self.driver_directory = driver_directory
        self.retry_attempts = max(1, retry_attempts if retry_attempts is not None else settings.persistence_retry_attempts)
        self.retry_base_delay = retry_base_delay if retry_base_delay is not None else settings.persistence_retry_base_delay
        self._sleep = sleep

    def _with_retries(self, action: str, fn: Callable[[], T]) -> T:
        """Run fn, retrying PersistenceError with exponential backoff and jitter."""
        for attempt in range(self.retry_attempts):
            try:
                return fn()
            except PersistenceError:
                if attempt == self.retry_attempts - 1:
                    raise
                delay = self.retry_base_delay * (2 ** attempt) * (0.5 + random.random())
                logger.warning("%s failed (attempt %d/%d), retrying in %.2fs", action, attempt + 1, self.retry_attempts, delay)
                self._sleep(delay)
        raise AssertionError("unreachable")

    def _run_step(self, name: str, failed_steps: list[str], fn: Callable[[], object]) -> None:
        try:
            fn()
        except Exception:
            logger.exception("Learning step %s failed", name)
            failed_steps.append(name)

    def _adjust(self, user_id, field, value, weight, mode, key=None) -> None:
        # Retries wrap a single write, never a whole step
        self._with_retries(
            f"adjust {field}",
            lambda: self.repository.apply_adjustment(user_id, field, value, weight, mode, key=key),
        )

    def _update_weight(self, feature: str, accuracy: float, adjustment: float) -> None:
        self._with_retries(
            f"update_feature_weight {feature}",
            lambda: self.repository.update_feature_weight(feature, accuracy, adjustment),
        )

    def record_feedback(self, feedback: RideFeedback) -> FeedbackOutcome:
        """Store one ride's feedback and learn from it.

        Raises FeedbackRejectedError when the feedback itself could not be
        stored; the caller should retry. Re-submitting a ride is a no-op.
        """
        try:
            inserted = self._with_retries(
                "append_feedback", lambda: self.repository.append_feedback(feedback)
            )
        except PersistenceError as e:
            logger.error("Rejected feedback for ride %s: %s", feedback.ride_id, e)
            raise FeedbackRejectedError(feedback.ride_id) from e

        if not inserted:
            logger.info("Feedback for ride %s already recorded, skipping", feedback.ride_id)
            return FeedbackOutcome(ride_id=feedback.ride_id, status="duplicate")

        weight = satisfaction_weight(feedback)
        failed_steps: list[str] = []

        self._run_step("driver_preferences", failed_steps, lambda: self._learn_driver_preferences(feedback, weight))
        self._run_step("price_sensitivity", failed_steps, lambda: self._learn_price_sensitivity(feedback))
        self._run_step("driver_loyalty", failed_steps, lambda: self._learn_loyalty(feedback, weight))
        self._run_step("ride_history", failed_steps, lambda: self._learn_ride_history(feedback, weight))

        accuracy = accuracy_score(feedback)
        adjustment = (accuracy - 50) / WEIGHT_ADJUSTMENT_SCALE
        for feature in FEATURE_NAMES:
            self._run_step(
                f"feature_weight:{feature}",
                failed_steps,
                lambda feature=feature: self._update_weight(feature, accuracy, adjustment),
            )

        if failed_steps:
            logger.error(
                "Partial failure learning from ride %s: feedback stored, failed steps %s",
                feedback.ride_id,
                ", ".join(failed_steps),
            )
        else:
            logger.info("Learned from ride %s (accuracy %.1f)", feedback.ride_id, accuracy)

        return FeedbackOutcome(
            ride_id=feedback.ride_id,
            status="recorded",
            accuracy_score=round(accuracy, 2),
            failed_steps=failed_steps,
        )

    def _observed_driver(self, feedback: RideFeedback) -> tuple[float | None, int | None]:
        rating = feedback.driver_rating
        seats = feedback.driver_seat_capacity
        if (rating is None or seats is None) and self.driver_directory is not None:
            driver = self.driver_directory.get_driver(feedback.driver_id)
            if driver is not None:
                rating = rating if rating is not None else driver.rating
                seats = seats if seats is not None else driver.seat_capacity
        return rating, seats

    def _learn_driver_preferences(self, feedback: RideFeedback, weight: float) -> None:
        if weight == 0:
            return
        rating, seats = self._observed_driver(feedback)
        user_id = feedback.user_id

        if weight > 0:
            if rating is not None:
                self._adjust(user_id, "preferred_rating", rating, weight, "reinforce")
            if seats is not None:
                self._adjust(user_id, "preferred_car_size", seats, weight, "reinforce")
        elif rating is not None:
            self._adjust(user_id, "preferred_rating", rating, abs(weight), "penalize")

        if rating is None:
            logger.warning("No rating known for driver %s, rating preference unchanged", feedback.driver_id)

    def _learn_price_sensitivity(self, feedback: RideFeedback) -> None:
        delta = PRICE_SENSITIVITY_DELTAS[feedback.price_acceptance]
        if delta:
            self._adjust(feedback.user_id, "price_sensitivity", delta, 1.0, "adjust")

    def _learn_loyalty(self, feedback: RideFeedback, weight: float) -> None:
        self._adjust(
            feedback.user_id,
            "driver_loyalty",
            weight * LOYALTY_SCALE,
            1.0,
            "loyalty_update",
            key=feedback.driver_id,
        )

    def _learn_ride_history(self, feedback: RideFeedback, weight: float) -> None:
        user_id = feedback.user_id
        self._adjust(user_id, "feedback_count", 1, 1.0, "adjust")

        if feedback.ride_distance_km is not None:
            self._adjust(
                user_id, "average_ride_distance_km", feedback.ride_distance_km, 1.0, "reinforce"
            )

        if feedback.ride_requested_at is not None and weight != 0:
            bucket = time_bucket(feedback.ride_requested_at.hour)
            self._adjust(
                user_id, "time_of_day_affinity", weight * TIME_AFFINITY_STEP, 1.0, "adjust", key=bucket
            )
