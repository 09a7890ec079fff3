"""Operations API endpoints (health, ready)."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from msgdispatch import __version__
from msgdispatch.api.deps import get_components, get_health
from msgdispatch.db.enums import MessageStatus
from msgdispatch.health import HealthState
from msgdispatch.schemas import ErrorResponse, HealthResponse, ReadyResponse
from msgdispatch.service import ServiceComponents

logger = logging.getLogger(__name__)

router = APIRouter(tags=["operations"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": ErrorResponse}},
)
async def health_check(
    request: Request,
    health: HealthState = Depends(get_health),
) -> HealthResponse:
    """Health check endpoint - 503 while the service is starting or draining."""
    if not health.is_healthy():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unavailable",
        )
    return HealthResponse(
        status="ok",
        version=__version__,
        instance_id=request.app.state.settings.instance_id,
    )


@router.get(
    "/ready",
    response_model=ReadyResponse,
    responses={503: {"model": ErrorResponse}},
)
async def ready_check(
    components: ServiceComponents = Depends(get_components),
) -> ReadyResponse:
    """Readiness check endpoint - verifies the message store and dedup cache."""
    try:
        await components.store.count([MessageStatus.PENDING])
    except Exception as e:
        logger.warning(f"Readiness check failed for database: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not ready",
        ) from e

    try:
        await components.cache.ping()
    except Exception as e:
        logger.warning(f"Readiness check failed for cache: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Cache not ready",
        ) from e

    return ReadyResponse(worker_running=components.worker.running)
