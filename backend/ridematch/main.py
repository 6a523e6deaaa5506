"""FastAPI application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import redis
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from sqlalchemy import text

from ridematch.config import get_settings
from ridematch.models.base import engine, SyncSessionLocal, Base
from ridematch.api.v1 import router as api_v1_router

# Register tables on Base.metadata
from ridematch.models.global_feature_weight import GlobalFeatureWeightRow  # noqa: F401
from ridematch.models.ride_feedback import RideFeedbackRow  # noqa: F401
from ridematch.models.user_preference_profile import UserPreferenceProfileRow  # noqa: F401

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info("Starting %s...", settings.app_name)
    Base.metadata.create_all(engine)
    logger.info("Database tables verified")
    yield
    logger.info("Shutting down...")
    engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Driver recommendation and preference-learning engine",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(GZipMiddleware, minimum_size=500)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_v1_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "app": settings.app_name}


def _dependency_checks() -> dict:
    checks = {}

    # Database
    try:
        with SyncSessionLocal() as session:
            session.execute(text("SELECT 1")).scalar()
            checks["database"] = {"ok": True}
    except Exception as e:
        checks["database"] = {"ok": False, "message": str(e)}

    # Redis
    try:
        r = redis.from_url(settings.redis_url, socket_timeout=5)
        r.ping()
        checks["redis"] = {"ok": True}
    except Exception as e:
        checks["redis"] = {"ok": False, "message": str(e)}

    # Celery workers
    try:
        from ridematch.tasks.celery_app import celery_app
        inspect = celery_app.control.inspect(timeout=5)
        active_workers = inspect.active()
        checks["celery_workers"] = {
            "ok": bool(active_workers),
            "workers": list(active_workers.keys()) if active_workers else [],
        }
    except Exception as e:
        checks["celery_workers"] = {"ok": False, "message": str(e)}

    return checks


@app.get("/health/detailed")
async def detailed_health_check():
    checks = await asyncio.to_thread(_dependency_checks)
    all_ok = all(check.get("ok", False) for check in checks.values())
    status = "healthy" if all_ok else "degraded"

    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }
