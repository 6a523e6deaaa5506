"""Ride feedback endpoint."""

import asyncio

from fastapi import APIRouter, Depends, HTTPException

from ridematch.dependencies.engine import get_learning_service
from ridematch.errors import FeedbackRejectedError
from ridematch.schemas.feedback import FeedbackOutcome, RideFeedback
from ridematch.services.learning_service import LearningService

router = APIRouter(prefix="/feedback", tags=["feedback"])


@router.post("", response_model=FeedbackOutcome)
async def submit_feedback(
    feedback: RideFeedback,
    service: LearningService = Depends(get_learning_service),
):
    """Record feedback for a completed ride. Safe to resubmit."""
    try:
        return await asyncio.to_thread(service.record_feedback, feedback)
    except FeedbackRejectedError as e:
        raise HTTPException(status_code=503, detail=str(e))
