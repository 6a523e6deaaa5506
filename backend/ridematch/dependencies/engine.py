"""Service dependencies for FastAPI routes."""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from ridematch.models.base import get_db
from ridematch.repositories.base import LearningRepository
from ridematch.repositories.sql import SqlLearningRepository
from ridematch.services.driver_directory import build_driver_directory
from ridematch.services.learning_service import LearningService
from ridematch.services.metrics_service import MetricsService
from ridematch.services.pricing_service import PricingService
from ridematch.services.recommendation_service import RecommendationService


def get_repository(db: Session = Depends(get_db)) -> LearningRepository:
    return SqlLearningRepository(db)


@lru_cache
def get_pricing_service() -> PricingService:
    """Process-wide pricing service (holds the weather provider)."""
    return PricingService()


def get_recommendation_service(
    repository: LearningRepository = Depends(get_repository),
    pricing: PricingService = Depends(get_pricing_service),
) -> RecommendationService:
    return RecommendationService(repository, pricing)


def get_learning_service(repository: LearningRepository = Depends(get_repository)) -> LearningService:
    return LearningService(repository, build_driver_directory())


def get_metrics_service(repository: LearningRepository = Depends(get_repository)) -> MetricsService:
    return MetricsService(repository)
