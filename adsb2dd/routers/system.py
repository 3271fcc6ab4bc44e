"""
System health API endpoint.
"""
from fastapi import APIRouter, Depends

from adsb2dd.routers.dependencies import get_registry, get_scheduler
from adsb2dd.schemas import HealthResponse
from adsb2dd.services.registry import ConfigRegistry
from adsb2dd.services.scheduler import UpdateScheduler

router = APIRouter(prefix="/api", tags=["System"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Report registry usage and update loop state."
)
async def health_check(
    registry: ConfigRegistry = Depends(get_registry),
    scheduler: UpdateScheduler = Depends(get_scheduler),
):
    """Health of the registry and update loop."""
    return HealthResponse(
        status="healthy" if scheduler.running else "degraded",
        scheduler=scheduler.state.value,
        configs=len(registry),
        max_configs=registry.max_configs,
        ticks=scheduler.ticks,
        last_tick_duration=scheduler.last_tick_duration,
    )
