"""Celery tasks for periodic learning reports."""

import logging

from ridematch.tasks.celery_app import celery_app
from ridematch.config import get_settings
from ridematch.models.base import SyncSessionLocal
from ridematch.repositories.sql import SqlLearningRepository
from ridematch.services.metrics_service import MetricsService

logger = logging.getLogger(__name__)


@celery_app.task(name="ridematch.tasks.metrics_tasks.report_learning_metrics")
def report_learning_metrics(window: str | None = None) -> dict:
    """Log recommendation quality and tuning suggestions (runs daily via beat)."""
    window = window or get_settings().metrics_report_window

    with SyncSessionLocal() as session:
        service = MetricsService(SqlLearningRepository(session))
        metrics = service.metrics(window)
        suggestions = service.improvement_suggestions(window)

    if metrics.is_empty:
        logger.info("No ride feedback in the last %s", window)
    else:
        logger.info(
            "Learning metrics (%s): %d rides, mean accuracy score %.1f, satisfaction %.0f%%, avg position %.2f",
            window,
            metrics.sample_size,
            metrics.mean_accuracy_score,
            metrics.satisfaction_rate * 100,
            metrics.average_selected_position,
        )
        for area in metrics.improvement_areas:
            logger.info("Improvement area: %s", area)
        for suggestion in suggestions:
            logger.info("Suggestion: %s", suggestion)

    return {"metrics": metrics.model_dump(), "suggestions": suggestions}
