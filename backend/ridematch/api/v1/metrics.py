"""Learning metrics endpoints."""

import asyncio

from fastapi import APIRouter, Depends, HTTPException, Query

from ridematch.dependencies.engine import get_metrics_service
from ridematch.errors import PersistenceError
from ridematch.schemas.metrics import LearningMetrics, MetricsWindow
from ridematch.services.metrics_service import MetricsService

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("", response_model=LearningMetrics)
async def get_metrics(
    window: MetricsWindow = Query("week"),
    service: MetricsService = Depends(get_metrics_service),
):
    try:
        return await asyncio.to_thread(service.metrics, window)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/suggestions", response_model=list[str])
async def get_improvement_suggestions(
    window: MetricsWindow = Query("week"),
    service: MetricsService = Depends(get_metrics_service),
):
    """Rule-based tuning suggestions for the recommendation engine."""
    try:
        return await asyncio.to_thread(service.improvement_suggestions, window)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
