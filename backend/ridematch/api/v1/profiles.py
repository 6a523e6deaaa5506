"""Preference profile and feature weight endpoints."""

import asyncio

from fastapi import APIRouter, Depends, HTTPException

from ridematch.dependencies.engine import get_repository
from ridematch.errors import PersistenceError
from ridematch.repositories.base import LearningRepository
from ridematch.schemas.feedback import GlobalFeatureWeight
from ridematch.schemas.profile import UserPreferenceProfile

router = APIRouter(tags=["profiles"])


@router.get("/profiles/{user_id}", response_model=UserPreferenceProfile)
async def get_profile(user_id: str, repository: LearningRepository = Depends(get_repository)):
    """Learned preferences for a user (defaults if none learned yet)."""
    try:
        return await asyncio.to_thread(repository.get_profile, user_id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/weights", response_model=list[GlobalFeatureWeight])
async def list_feature_weights(repository: LearningRepository = Depends(get_repository)):
    try:
        return await asyncio.to_thread(repository.get_feature_weights)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
