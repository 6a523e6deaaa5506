"""API v1 router aggregation."""

from fastapi import APIRouter

from ridematch.api.v1.suggestions import router as suggestions_router
from ridematch.api.v1.feedback import router as feedback_router
from ridematch.api.v1.profiles import router as profiles_router
from ridematch.api.v1.metrics import router as metrics_router

router = APIRouter(prefix="/api/v1")

router.include_router(suggestions_router)
router.include_router(feedback_router)
router.include_router(profiles_router)
router.include_router(metrics_router)
