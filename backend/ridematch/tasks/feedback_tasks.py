"""Celery tasks for ride feedback ingestion."""

import logging

from ridematch.tasks.celery_app import celery_app
from ridematch.errors import FeedbackRejectedError, PersistenceError
from ridematch.models.base import SyncSessionLocal
from ridematch.repositories.sql import SqlLearningRepository
from ridematch.schemas.feedback import RideFeedback
from ridematch.services.driver_directory import build_driver_directory
from ridematch.services.learning_service import LearningService

logger = logging.getLogger(__name__)


@celery_app.task(
    name="ridematch.tasks.feedback_tasks.record_ride_feedback",
    autoretry_for=(PersistenceError, FeedbackRejectedError),
    retry_backoff=True,
    retry_backoff_max=300,
    max_retries=8,
)
def record_ride_feedback(payload: dict) -> dict:
    """Ingest one completed ride's feedback.

    Redelivered or retried messages are harmless: the second write of a
    ride_id is reported as a duplicate and learning is not repeated.
    """
    feedback = RideFeedback.model_validate(payload)

    with SyncSessionLocal() as session:
        service = LearningService(SqlLearningRepository(session), build_driver_directory())
        outcome = service.record_feedback(feedback)

    if outcome.failed_steps:
        logger.warning("Ride %s recorded with failed learning steps: %s", outcome.ride_id, outcome.failed_steps)
    return outcome.model_dump()
