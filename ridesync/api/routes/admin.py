"""
Admin / observability endpoints
===============================

GET /api/v1/admin/health -- simple health check with cache size
"""

from fastapi import APIRouter, Depends

from ridesync.api.dependencies import get_components
from ridesync.api.schemas import HealthResponse
from ridesync.runtime import RideComponents

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(components: RideComponents = Depends(get_components)):
    return HealthResponse(rides_cached=len(components.state.snapshot.rides))
