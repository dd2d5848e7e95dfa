import logging
from fastapi import APIRouter, Depends, HTTPException, status

from waiting_room.api.dependencies import get_admission_scheduler, get_store
from waiting_room.core.store import OrderedScoreStore
from waiting_room.exceptions import StoreUnavailableError
from waiting_room.services.admission_scheduler import AdmissionSchedulerService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def root_health_check():
    return {"status": "ok"}


@router.get("/redis")
async def redis_health_check(store: OrderedScoreStore = Depends(get_store)):
    """Check Redis connection status."""
    try:
        await store.ping()
        return {"status": "ok", "redis": "connected"}
    except StoreUnavailableError as e:
        logger.error(f"Redis health check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Redis connection failed: {e.message}",
        )


@router.get("/scheduler")
async def scheduler_health_check(
    scheduler: AdmissionSchedulerService = Depends(get_admission_scheduler)
):
    """Status and counters of the admission scheduler."""
    return {"status": "ok", "scheduler": scheduler.stats()}
