"""Driver suggestion endpoint."""

import asyncio

from fastapi import APIRouter, Depends, HTTPException, Query

from ridematch.dependencies.engine import get_recommendation_service
from ridematch.errors import EngineUnavailableError, InvalidTripRequestError
from ridematch.schemas.suggestion import (
    ContextualInfo,
    RankedSuggestions,
    SuggestionInsights,
    SuggestionRequest,
    SuggestionResponse,
)
from ridematch.services.recommendation_service import RecommendationService

router = APIRouter(prefix="/suggestions", tags=["suggestions"])


@router.post("", response_model=SuggestionResponse)
async def suggest_drivers(
    body: SuggestionRequest,
    personalized: bool = Query(True, description="Use the rider's learned preferences when available"),
    service: RecommendationService = Depends(get_recommendation_service),
):
    """Rank the supplied driver pool for one trip request."""
    try:
        result = await asyncio.to_thread(service.suggest, body.trip, body.drivers, personalized=personalized)
    except InvalidTripRequestError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except EngineUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    available = sum(1 for d in body.drivers if d.is_available)

    if not isinstance(result, RankedSuggestions):
        return SuggestionResponse(
            status="no_drivers_matched",
            suggestions=[],
            contextual_info=ContextualInfo(
                total_available_drivers=available,
                eligible_drivers=0,
                passenger_count=body.trip.passenger_count,
                context_factors=[],
                user_preferences=result.preferences,
            ),
        )

    context = result.pricing_context
    return SuggestionResponse(
        status="ok",
        suggestions=result.suggestions,
        contextual_info=ContextualInfo(
            total_available_drivers=available,
            eligible_drivers=result.eligible_drivers,
            passenger_count=body.trip.passenger_count,
            context_factors=context.context_factors,
            user_preferences=result.preferences,
        ),
        insights=SuggestionInsights(
            personalization_level="personalized" if result.personalized else "standard",
            time_multiplier=context.time_multiplier,
            demand_level="high" if context.demand_multiplier > 1 else "normal",
            weather=context.weather,
        ),
    )
