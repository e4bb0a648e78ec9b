"""FastAPI route definitions."""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Depends

from ..exceptions import NoRoutesAvailable
from ..models.commute import PlanningResult
from ..models.requests import PlanningRequest
from ..processing.pipeline import CommuteRoutePipeline

logger = logging.getLogger(__name__)

router = APIRouter()

ROUTE_PLANNING_FAILED = "ROUTE_PLANNING_FAILED"


# Dependency to get pipeline instance (set in main.py)
_pipeline: CommuteRoutePipeline = None


def get_pipeline() -> CommuteRoutePipeline:
    """Get the pipeline instance."""
    if _pipeline is None:
        raise HTTPException(status_code=503, detail="Pipeline not initialized")
    return _pipeline


def set_pipeline(pipeline: CommuteRoutePipeline):
    """Set the pipeline instance (called from main.py)."""
    global _pipeline
    _pipeline = pipeline


@router.get("/health")
async def health_check(pipeline: Annotated[CommuteRoutePipeline, Depends(get_pipeline)]):
    """Health check endpoint - does NOT call providers to preserve rate limits."""
    return {
        "status": "ok",
        "message": "Pipeline initialized",
        "providers": {
            "google_directions": pipeline.directions is not None,
            "openweathermap": pipeline.weather is not None,
            "airnow": pipeline.air_quality is not None,
            "hazard_feed": pipeline.hazard_feed is not None,
            "gemini": pipeline.advisor is not None,
        },
    }


@router.post("/routes/plan", response_model=PlanningResult)
async def plan_route(
    request: PlanningRequest,
    pipeline: Annotated[CommuteRoutePipeline, Depends(get_pipeline)],
) -> PlanningResult:
    """
    Plan commute routes.

    Returns fastest, eco and hazard-avoiding candidates scored for hazard
    exposure, current conditions, and a recommendation. Provider failures
    are absorbed by fallbacks; only a request with no route at all fails.
    """
    try:
        return await pipeline.plan(request)
    except NoRoutesAvailable as e:
        logger.error(f"Route planning failed: {e}")
        raise HTTPException(
            status_code=500,
            detail={"message": str(e), "code": ROUTE_PLANNING_FAILED},
        )
    except Exception as e:
        logger.exception("Route planning failed")
        raise HTTPException(
            status_code=500,
            detail={"message": str(e) or "Failed to plan route", "code": ROUTE_PLANNING_FAILED},
        )
